"""Search engine protocols for dependency injection."""
from typing import Any, Optional, Protocol, runtime_checkable

from ..models.document import DocumentPart, StoredDocumentPartsInfo
from ..models.index import CreateIndexParams, IndexInfo, KnnIndexParams


@runtime_checkable
class SearchEngineProtocol(Protocol):
    """Protocol for executing queries and walking scroll sessions."""

    def search(
        self,
        indexes: list[str],
        query: dict[str, Any],
        scroll: Optional[str] = None,
    ) -> dict[str, Any]:
        """Execute query.

        Args:
            indexes: Index names, ``["*"]`` for all.
            query: Engine query document.
            scroll: Lifetime of the scroll session to open.

        Returns:
            Decoded engine response.
        """
        ...

    def scroll(self, cursor: str, lifetime: str) -> dict[str, Any]:
        """Fetch next page of a scroll session.

        Args:
            cursor: Scroll id from the previous response.
            lifetime: New validity window of the session.

        Returns:
            Decoded engine response.
        """
        ...

    def clear_scroll(self, cursor: str) -> None:
        """Close scroll session."""
        ...


@runtime_checkable
class IndexStorageProtocol(Protocol):
    """Protocol for index provisioning."""

    def create_index(self, params: CreateIndexParams) -> str:
        ...

    def delete_index(self, index_id: str) -> None:
        ...

    def get_index(self, index_id: str) -> IndexInfo:
        ...

    def get_all_indexes(self) -> list[IndexInfo]:
        ...

    def init_pipelines(self, params: KnnIndexParams) -> None:
        ...


@runtime_checkable
class DocumentStorageProtocol(Protocol):
    """Protocol for storing document parts."""

    def store_document_parts(
        self, index_id: str, parts: list[DocumentPart]
    ) -> StoredDocumentPartsInfo:
        """Store all parts of one large document.

        Args:
            index_id: Target index.
            parts: Parts sharing one ``large_doc_id``.

        Returns:
            Stored parts info.
        """
        ...

    def get_document_part(self, index_id: str, doc_part_id: str) -> DocumentPart:
        """Fetch one stored part by its stored id.

        Raises:
            DocumentNotFoundError: No part with this id in the index.
        """
        ...

    def delete_document_parts(self, index_id: str, large_doc_id: str) -> None:
        ...
