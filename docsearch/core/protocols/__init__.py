"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .search_engine import (
    DocumentStorageProtocol,
    IndexStorageProtocol,
    SearchEngineProtocol,
)

__all__ = [
    "EmbedderProtocol",
    "SearchEngineProtocol",
    "IndexStorageProtocol",
    "DocumentStorageProtocol",
]
