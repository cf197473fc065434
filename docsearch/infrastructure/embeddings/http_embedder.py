import logging
from typing import Optional

import httpx

from docsearch.core.errors import (
    DocSearchError,
    RequestTimeoutError,
    SerdeError,
    ServiceError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

EMBEDDINGS_URL = "/embeddings"


class HttpEmbedder:
    """Embedder backed by a remote embeddings service."""

    def __init__(
        self,
        address: str = "http://localhost:8085",
        model: str = "bge",
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize embeddings client.

        Args:
            address: Embeddings service URL.
            model: Model name passed to the service.
            timeout: Request timeout in seconds.
            client: Preconfigured HTTP client.
        """
        self._url = f"{address.rstrip('/')}{EMBEDDINGS_URL}"
        self._model = model
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def embed(self, text: str) -> list[float]:
        try:
            resp = self._client.post(self._url, json={"content": text, "model": self._model})
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"embeddings request timed out: {e}") from e
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"embeddings service is unavailable: {e}") from e

        if resp.status_code != 200:
            raise self._classify(resp)

        try:
            data = resp.json()
            vector = data[0]["embedding"][0]
        except (ValueError, LookupError, TypeError) as e:
            raise SerdeError(f"unexpected embeddings response: {e}") from e

        if not isinstance(vector, list) or not vector:
            raise SerdeError("returned empty embeddings vector")

        logger.debug(f"Embedded {len(text)} chars -> {len(vector)} dims")
        return [float(v) for v in vector]

    @staticmethod
    def _classify(resp: httpx.Response) -> DocSearchError:
        message = f"embeddings service returned {resp.status_code}: {resp.text[:200]}"
        if resp.status_code == 503:
            return ServiceUnavailableError(message)
        if resp.status_code in (408, 504):
            return RequestTimeoutError(message)
        return ServiceError(message, status_code=resp.status_code)

    def embed_passage(self, text: str) -> list[float]:
        # the service embeds queries and passages alike
        return self.embed(text)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpEmbedder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
