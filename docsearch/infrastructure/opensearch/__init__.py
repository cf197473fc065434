"""OpenSearch storage collaborator."""
from .client import OpenSearchClient

__all__ = ["OpenSearchClient"]
