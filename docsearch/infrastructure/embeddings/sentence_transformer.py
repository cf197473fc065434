import logging
from functools import cached_property
from typing import Optional

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Embedder running a local sentence-transformers model.

    e5 models are asymmetric: queries and stored passages take
    different role prefixes.
    """

    def __init__(
        self,
        model_name: str = "intfloat/multilingual-e5-small",
        query_prefix: str = "query: ",
        passage_prefix: str = "passage: ",
        device: Optional[str] = None,
    ):
        self._model_name = model_name
        self._query_prefix = query_prefix
        self._passage_prefix = passage_prefix
        self._device = device

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model {self._model_name} on {self._device or 'auto'}")
        return SentenceTransformer(self._model_name, device=self._device)

    def embed(self, text: str) -> list[float]:
        return self._encode(f"{self._query_prefix}{text}")

    def embed_passage(self, text: str) -> list[float]:
        return self._encode(f"{self._passage_prefix}{text}")

    def _encode(self, text: str) -> list[float]:
        vector = self.model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
        return np.asarray(vector, dtype=np.float32).ravel().tolist()
