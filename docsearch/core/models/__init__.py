"""Domain models."""
from .document import DocumentPart, Embeddings, LargeDocument, StoredDocumentPartsInfo
from .index import CreateIndexParams, IndexInfo, KnnIndexParams
from .metadata import DocumentClass, DocumentLocation, DocumentMetadata
from .searching import (
    FilterParams,
    FoundedDocument,
    FullTextParams,
    HybridParams,
    MatchOperator,
    Paginated,
    PaginateParams,
    ResultOrder,
    ResultParams,
    RetrieveParams,
    ScrollCursor,
    SearchingParams,
    SemanticParams,
)

__all__ = [
    "DocumentPart",
    "Embeddings",
    "LargeDocument",
    "StoredDocumentPartsInfo",
    "CreateIndexParams",
    "IndexInfo",
    "KnnIndexParams",
    "DocumentClass",
    "DocumentLocation",
    "DocumentMetadata",
    "FilterParams",
    "FoundedDocument",
    "FullTextParams",
    "HybridParams",
    "MatchOperator",
    "Paginated",
    "PaginateParams",
    "ResultOrder",
    "ResultParams",
    "RetrieveParams",
    "ScrollCursor",
    "SearchingParams",
    "SemanticParams",
]
