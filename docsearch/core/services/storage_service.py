"""Storage service - index provisioning and document ingestion."""

import logging
from pathlib import Path
from typing import Optional

from ..errors import DocSearchError, ValidationError
from ..models.document import (
    DocumentPart,
    Embeddings,
    LargeDocument,
    StoredDocumentPartsInfo,
)
from ..models.index import CreateIndexParams, IndexInfo, KnnIndexParams
from ..models.searching import (
    ResultOrder,
    ResultParams,
    RetrieveParams,
    SearchingParams,
)
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_engine import (
    DocumentStorageProtocol,
    IndexStorageProtocol,
    SearchEngineProtocol,
)
from ..query.composer import compose
from ..query.extractor import extract
from .paginator_service import PaginatorService
from .segmenter import divide

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}
PARTS_PAGE_SIZE = 100


class StorageService:
    """Service for provisioning indexes and storing documents."""

    def __init__(
        self,
        indexes: IndexStorageProtocol,
        documents: DocumentStorageProtocol,
        engine: SearchEngineProtocol,
        paginator: PaginatorService,
        embedder: Optional[EmbedderProtocol] = None,
        max_content_size: int = 3000,
        overlap_rate: float = 0.2,
        scroll_lifetime: str = "5m",
    ):
        """Initialize storage service.

        Args:
            indexes: Index provisioning client.
            documents: Document parts storage client.
            engine: Search engine client.
            paginator: Scroll session manager.
            embedder: Embeds parts before storing, None leaves it to the engine.
            max_content_size: Max characters per document part.
            overlap_rate: Fraction of a part shared with its neighbour.
            scroll_lifetime: Lifetime of scroll sessions reading parts.
        """
        self._indexes = indexes
        self._documents = documents
        self._engine = engine
        self._paginator = paginator
        self._embedder = embedder
        self._max_content_size = max_content_size
        self._overlap_rate = overlap_rate
        self._scroll_lifetime = scroll_lifetime

    def create_index(self, params: CreateIndexParams) -> str:
        if not params.id or params.id.startswith((".", "_")) or params.id != params.id.lower():
            raise ValidationError(f"invalid index name: {params.id!r}")
        if params.knn is not None and not 0.0 <= params.knn.overlap_rate < 1.0:
            raise ValidationError(f"overlap rate must be in [0, 1): {params.knn.overlap_rate}")
        return self._indexes.create_index(params)

    def delete_index(self, index_id: str) -> None:
        self._indexes.delete_index(index_id)

    def get_index(self, index_id: str) -> IndexInfo:
        return self._indexes.get_index(index_id)

    def get_all_indexes(self) -> list[IndexInfo]:
        return self._indexes.get_all_indexes()

    def init_pipelines(self, params: Optional[KnnIndexParams] = None) -> None:
        self._indexes.init_pipelines(params or KnnIndexParams())

    def store_document(self, index_id: str, document: LargeDocument) -> StoredDocumentPartsInfo:
        """Divide document on parts and store them.

        Args:
            index_id: Target index, must exist.
            document: Document to store.

        Returns:
            Stored parts info.
        """
        self._indexes.get_index(index_id)

        parts = divide(document, self._max_content_size, self._overlap_rate)
        if self._embedder is not None:
            parts = [self._embed_part(part) for part in parts]

        return self._documents.store_document_parts(index_id, parts)

    def get_document_parts(self, index_id: str, large_doc_id: str) -> list[DocumentPart]:
        """Fetch all parts of a document ordered by part id."""
        params = SearchingParams(
            indexes=[index_id],
            kind=RetrieveParams(large_doc_id=large_doc_id),
            result=ResultParams(
                size=PARTS_PAGE_SIZE,
                order=ResultOrder.ASC,
                exclude_fields=["embeddings"],
            ),
        )
        raw = self._engine.search(params.indexes, compose(params), scroll=self._scroll_lifetime)

        parts = []
        for page in self._paginator.walk(extract(raw), self._scroll_lifetime):
            parts.extend(founded.document for founded in page.founded)

        parts.sort(key=lambda part: part.doc_part_id)
        return parts

    def get_document_part(self, index_id: str, doc_part_id: str) -> DocumentPart:
        """Fetch one part by the id it was stored under."""
        if not doc_part_id:
            raise ValidationError("document part id must not be empty")
        return self._documents.get_document_part(index_id, doc_part_id)

    def delete_document(self, index_id: str, large_doc_id: str) -> None:
        self._documents.delete_document_parts(index_id, large_doc_id)
        logger.info(f"Deleted document {large_doc_id} from {index_id}")

    def ingest_path(self, index_id: str, docs_path: str | Path) -> int:
        """Store every plain-text file of a folder.

        Args:
            index_id: Target index.
            docs_path: Folder with documents.

        Returns:
            Number of stored documents.
        """
        docs_path = Path(docs_path)
        if not docs_path.is_dir():
            raise ValidationError(f"docs path not found: {docs_path}")

        stored = 0
        for file_path in sorted(docs_path.iterdir()):
            if file_path.suffix.lower() not in TEXT_EXTENSIONS:
                continue

            document = self._load_document(file_path)
            if not document.content.strip():
                logger.debug(f"Skip empty: {file_path.name}")
                continue

            try:
                info = self.store_document(index_id, document)
            except DocSearchError as e:
                logger.error(f"Failed to store {file_path.name}: {e}")
                raise

            stored += 1
            logger.info(f"Stored {file_path.name}: {info.doc_parts_amount} parts")

        logger.info(f"Ingest complete: {stored} documents into {index_id}")
        return stored

    def _embed_part(self, part: DocumentPart) -> DocumentPart:
        content = part.content or ""
        part.chunked_text = [content]
        part.embeddings = [Embeddings(knn=self._embedder.embed_passage(content))]
        return part

    @staticmethod
    def _load_document(file_path: Path) -> LargeDocument:
        stat = file_path.stat()
        return LargeDocument(
            file_name=file_path.name,
            file_path=str(file_path),
            file_size=stat.st_size,
            created_at=int(stat.st_ctime),
            modified_at=int(stat.st_mtime),
            content=file_path.read_text(encoding="utf-8"),
        )
