"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    def embed(self, text: str) -> list[float]:
        """Encode search query to a fixed-length vector.

        Args:
            text: Query text.

        Returns:
            Embedding vector.

        Raises:
            ServiceUnavailableError: Service can not be reached.
            RequestTimeoutError: Service did not answer in time.
            ServiceError: Service returned an error.
        """
        ...

    def embed_passage(self, text: str) -> list[float]:
        """Encode stored document text, the counterpart of ``embed``."""
        ...
