"""Search service - validates requests and runs them against the engine."""

import logging
from dataclasses import replace
from typing import Optional, assert_never

from ..errors import ValidationError
from ..models.searching import (
    FullTextParams,
    HybridParams,
    Paginated,
    RetrieveParams,
    ScrollCursor,
    SearchingParams,
    SemanticParams,
)
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_engine import SearchEngineProtocol
from ..query.composer import compose
from ..query.extractor import extract
from .paginator_service import PaginatorService

logger = logging.getLogger(__name__)


class SearchService:
    """Search orchestrator over the engine and the embedder."""

    def __init__(
        self,
        engine: SearchEngineProtocol,
        paginator: PaginatorService,
        embedder: Optional[EmbedderProtocol] = None,
        scroll_lifetime: str = "5m",
        knn_ef_search: Optional[int] = None,
    ):
        """Initialize search service.

        Args:
            engine: Search engine client.
            paginator: Scroll session manager.
            embedder: Embedding service resolving query vectors.
            scroll_lifetime: Lifetime of sessions opened by first pages.
            knn_ef_search: Default candidate breadth of vector queries.
        """
        self._engine = engine
        self._paginator = paginator
        self._embedder = embedder
        self._scroll_lifetime = scroll_lifetime
        self._knn_ef_search = knn_ef_search

    def retrieve(self, params: SearchingParams) -> Paginated:
        """Exact retrieval by path or document identifiers."""
        self._expect_kind(params, RetrieveParams)
        return self.search(params)

    def fulltext(self, params: SearchingParams) -> Paginated:
        self._expect_kind(params, FullTextParams)
        return self.search(params)

    def semantic(self, params: SearchingParams) -> Paginated:
        self._expect_kind(params, SemanticParams)
        return self.search(params)

    def hybrid(self, params: SearchingParams) -> Paginated:
        self._expect_kind(params, HybridParams)
        return self.search(params)

    def search(self, params: SearchingParams) -> Paginated:
        """Run search of any kind.

        Args:
            params: Search parameters.

        Returns:
            First page of results.

        Raises:
            ValidationError: Structural parameters are missing.
            DocSearchError: Engine or embedder failure.
        """
        self._validate(params)
        params = self._resolve_vector(params)

        query = compose(params)
        raw = self._engine.search(params.indexes, query, scroll=self._scroll_for(params))
        page = extract(raw)

        logger.info(
            f"Search {type(params.kind).__name__}: returned {len(page.founded)} docs "
            f"from {','.join(params.indexes)}"
        )
        return page

    def paginate(self, cursor: ScrollCursor, lifetime: Optional[str] = None) -> Paginated:
        return self._paginator.paginate(cursor, lifetime)

    def delete_session(self, cursor: ScrollCursor) -> None:
        self._paginator.delete_session(cursor)

    def _scroll_for(self, params: SearchingParams) -> Optional[str]:
        # Hybrid queries and offset pages are not scrollable
        if params.result.offset > 0 or isinstance(params.kind, HybridParams):
            return None
        return self._scroll_lifetime

    def _validate(self, params: SearchingParams) -> None:
        if not params.indexes or not all(params.indexes):
            raise ValidationError("at least one index must be specified")

        if params.result.size <= 0:
            raise ValidationError(f"result size must be positive: {params.result.size}")

        if params.result.offset < 0:
            raise ValidationError(f"result offset must not be negative: {params.result.offset}")

        kind = params.kind
        if isinstance(kind, (RetrieveParams, FullTextParams)):
            return
        elif isinstance(kind, (SemanticParams, HybridParams)):
            if kind.knn_amount <= 0:
                raise ValidationError(f"knn amount must be positive: {kind.knn_amount}")
            if not kind.query and not kind.vector:
                raise ValidationError("query text or precomputed vector is required")
        else:
            assert_never(kind)

    def _resolve_vector(self, params: SearchingParams) -> SearchingParams:
        kind = params.kind
        if not isinstance(kind, (SemanticParams, HybridParams)):
            return params

        if kind.ef_search is None and self._knn_ef_search is not None:
            kind = replace(kind, ef_search=self._knn_ef_search)

        if not kind.vector:
            if self._embedder is None:
                raise ValidationError("embedder is not configured, precomputed vector required")
            kind = replace(kind, vector=self._embedder.embed(kind.query))

        return replace(params, kind=kind)

    @staticmethod
    def _expect_kind(params: SearchingParams, kind: type) -> None:
        if not isinstance(params.kind, kind):
            raise ValidationError(
                f"expected {kind.__name__} search, got {type(params.kind).__name__}"
            )
