"""Search parameters and search result models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import NewType, Optional, Union

from .document import DocumentPart

ScrollCursor = NewType("ScrollCursor", str)

DEFAULT_EXCLUDED_FIELDS = ("chunked_text", "embeddings")
DEFAULT_FULLTEXT_FIELDS = ("content",)
DEFAULT_KNN_AMOUNT = 100
DEFAULT_PAGINATION_LIFETIME = "1m"


class MatchOperator(str, Enum):
    """Boolean operator joining full-text query terms."""
    OR = "or"
    AND = "and"


class ResultOrder(str, Enum):
    """Sort order by document creation time."""
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class FoundedDocument:
    """Search hit."""
    id: str
    index: str
    document: DocumentPart
    score: Optional[float] = None
    highlight: list[str] = field(default_factory=list)


@dataclass
class Paginated:
    """Page of founded documents.

    A missing cursor means the engine has no further results; an empty page
    with a cursor can still be resumed.
    """
    founded: list[FoundedDocument] = field(default_factory=list)
    cursor: Optional[ScrollCursor] = None

    @property
    def exhausted(self) -> bool:
        return self.cursor is None


@dataclass
class RetrieveParams:
    """Exact retrieval by path or identifiers."""
    path: Optional[str] = None
    large_doc_id: Optional[str] = None
    doc_part_id: Optional[int] = None


@dataclass
class FullTextParams:
    """Lexical search over text fields."""
    query: Optional[str] = None
    fields: list[str] = field(default_factory=lambda: list(DEFAULT_FULLTEXT_FIELDS))
    operator: MatchOperator = MatchOperator.OR


@dataclass
class SemanticParams:
    """Approximate nearest-neighbor search.

    Either ``query`` is resolved to a vector by the embedder, or a
    precomputed ``vector`` is used as is.
    """
    query: Optional[str] = None
    vector: Optional[list[float]] = None
    knn_amount: int = DEFAULT_KNN_AMOUNT
    ef_search: Optional[int] = None


@dataclass
class HybridParams:
    """Lexical and vector search combined disjunctively."""
    query: str
    vector: Optional[list[float]] = None
    knn_amount: int = DEFAULT_KNN_AMOUNT
    ef_search: Optional[int] = None
    fields: list[str] = field(default_factory=lambda: list(DEFAULT_FULLTEXT_FIELDS))
    operator: MatchOperator = MatchOperator.OR


SearchKindParams = Union[RetrieveParams, FullTextParams, SemanticParams, HybridParams]


@dataclass
class FilterParams:
    """Non-scoring predicates narrowing the candidate set."""
    created_from: Optional[int] = None
    created_to: Optional[int] = None
    modified_from: Optional[int] = None
    modified_to: Optional[int] = None
    size_from: Optional[int] = None
    size_to: Optional[int] = None
    location_coords: Optional[list[float]] = None  # [longitude, latitude]
    distance: Optional[str] = None
    source: Optional[str] = None
    semantic_source: Optional[str] = None
    class_label: Optional[str] = None
    class_probability: Optional[float] = None
    pipeline_label: Optional[str] = None


@dataclass
class ResultParams:
    """Page size, score cutoff and projection of returned documents."""
    size: int = 10
    offset: int = 0
    min_score: Optional[float] = None
    exclude_fields: Optional[list[str]] = None
    order: ResultOrder = ResultOrder.DESC
    highlight_pre_tag: str = ""
    highlight_post_tag: str = ""
    highlight_items: Optional[int] = None
    highlight_item_size: Optional[int] = None

    @property
    def excluded(self) -> list[str]:
        if self.exclude_fields is None:
            return list(DEFAULT_EXCLUDED_FIELDS)
        return list(self.exclude_fields)


@dataclass
class SearchingParams:
    """Typed search request."""
    indexes: list[str]
    kind: SearchKindParams
    result: ResultParams = field(default_factory=ResultParams)
    filter: Optional[FilterParams] = None


@dataclass
class PaginateParams:
    """Continuation of a scroll session."""
    cursor: ScrollCursor
    lifetime: str = DEFAULT_PAGINATION_LIFETIME
