"""Document domain models."""
import hashlib
from dataclasses import dataclass
from typing import Optional

from .metadata import DocumentMetadata


@dataclass
class Embeddings:
    """Embedding vector of one document sub-chunk."""
    knn: list[float]


@dataclass
class LargeDocument:
    """Whole document before it is divided on parts."""
    file_name: str
    file_path: str
    file_size: int
    created_at: int
    modified_at: int
    content: str
    metadata: Optional[DocumentMetadata] = None

    @property
    def large_doc_id(self) -> str:
        """Stable identifier shared by all parts of this document."""
        digest = hashlib.md5(f"{self.file_path}\n{self.content}".encode())
        return digest.hexdigest()


@dataclass
class DocumentPart:
    """Indexable part of a large document."""
    large_doc_id: str
    doc_part_id: int
    file_name: str
    file_path: str
    file_size: int
    created_at: int
    modified_at: int
    content: Optional[str] = None
    chunked_text: Optional[list[str]] = None
    embeddings: Optional[list[Embeddings]] = None
    metadata: Optional[DocumentMetadata] = None


@dataclass
class StoredDocumentPartsInfo:
    """Result of storing all parts of a large document."""
    large_doc_id: str
    first_part_id: str
    doc_parts_amount: int
