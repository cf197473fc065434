"""Paginator service - threads scroll cursors between calls."""

import logging
from typing import Iterator

from ..errors import ValidationError
from ..models.searching import DEFAULT_PAGINATION_LIFETIME, Paginated, ScrollCursor
from ..protocols.search_engine import SearchEngineProtocol
from ..query.extractor import extract

logger = logging.getLogger(__name__)


class PaginatorService:
    """Continues and closes scroll sessions.

    Holds no registry of live cursors: each page carries its own cursor,
    which replaces the one it was fetched with.
    """

    def __init__(
        self,
        engine: SearchEngineProtocol,
        lifetime: str = DEFAULT_PAGINATION_LIFETIME,
    ):
        """Initialize paginator.

        Args:
            engine: Search engine client.
            lifetime: Default validity window of renewed sessions.
        """
        self._engine = engine
        self._lifetime = lifetime

    def paginate(self, cursor: ScrollCursor, lifetime: str | None = None) -> Paginated:
        """Fetch next page and renew the session.

        Args:
            cursor: Cursor of the previous page. Must not be reused afterwards.
            lifetime: Validity window, engine shorthand like ``"1m"``.

        Returns:
            Next page; its cursor is None once results are exhausted.
        """
        if not cursor:
            raise ValidationError("cursor must not be empty")

        raw = self._engine.scroll(cursor, lifetime or self._lifetime)
        page = extract(raw)
        logger.debug(f"Paginate: {len(page.founded)} docs, exhausted={page.exhausted}")
        return page

    def delete_session(self, cursor: ScrollCursor) -> None:
        """Invalidate cursor before its lifetime expires."""
        if not cursor:
            raise ValidationError("cursor must not be empty")

        self._engine.clear_scroll(cursor)
        logger.info("Scroll session closed")

    def walk(self, page: Paginated, lifetime: str | None = None) -> Iterator[Paginated]:
        """Yield page and all its continuations.

        Stops on an exhausted or empty page and closes a session left open.

        Args:
            page: First page of the session.
            lifetime: Validity window for every renewal.

        Yields:
            Pages in engine order.
        """
        cursor = page.cursor
        empty = not page.founded
        try:
            yield page
            while cursor is not None and not empty:
                page = self.paginate(cursor, lifetime)
                cursor = page.cursor
                empty = not page.founded
                yield page
        finally:
            if cursor is not None:
                self.delete_session(cursor)
