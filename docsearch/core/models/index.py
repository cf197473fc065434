"""Index provisioning models."""
from dataclasses import dataclass, field
from typing import Optional

KNN_EF_SEARCH = 100
KNN_DIMENSION = 384
TOKEN_LIMIT = 700
OVERLAP_RATE = 0.2


@dataclass
class KnnIndexParams:
    """Vector search settings of an index."""
    knn_dimension: int = KNN_DIMENSION
    token_limit: int = TOKEN_LIMIT
    overlap_rate: float = OVERLAP_RATE
    knn_ef_search: int = KNN_EF_SEARCH


@dataclass
class CreateIndexParams:
    """Parameters of a new index."""
    id: str
    number_of_shards: int = 1
    number_of_replicas: int = 1
    knn: Optional[KnnIndexParams] = field(default_factory=KnnIndexParams)


@dataclass
class IndexInfo:
    """Index description returned by the engine."""
    name: str
    health: Optional[str] = None
    status: Optional[str] = None
    docs_count: int = 0
    store_size: Optional[str] = None
