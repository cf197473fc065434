"""Core business services."""
from .search_service import SearchService
from .paginator_service import PaginatorService
from .storage_service import StorageService
from .segmenter import divide

__all__ = [
    "SearchService",
    "PaginatorService",
    "StorageService",
    "divide",
]
