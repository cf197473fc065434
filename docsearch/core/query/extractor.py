"""Result extractor - parses engine responses into pages."""

import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import SerdeError
from ..models.searching import FoundedDocument, Paginated, ScrollCursor
from .dto import FoundedDocumentInfo

logger = logging.getLogger(__name__)


def extract(raw: Any) -> Paginated:
    """Build page of founded documents from a search response.

    Hits that fail to deserialize are dropped and logged; they never
    fail the whole page.

    Args:
        raw: Decoded engine response.

    Returns:
        Page with the response cursor, None when results are exhausted.

    Raises:
        SerdeError: Response is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise SerdeError(f"expected JSON object in response, got {type(raw).__name__}")

    return Paginated(founded=_extract_hits(raw), cursor=extract_cursor(raw))


def extract_cursor(raw: dict) -> Optional[ScrollCursor]:
    scroll_id = raw.get("_scroll_id")
    if isinstance(scroll_id, str):
        return ScrollCursor(scroll_id)
    return None


def _extract_hits(raw: dict) -> list[FoundedDocument]:
    hits_container = raw.get("hits")
    hits = hits_container.get("hits") if isinstance(hits_container, dict) else None
    if not isinstance(hits, list):
        logger.warning("Response has no hits array, returning empty page")
        return []

    founded = []
    dropped = 0
    for hit in hits:
        try:
            info = FoundedDocumentInfo.model_validate(hit)
        except PydanticValidationError as e:
            dropped += 1
            logger.debug(f"Failed to deserialize founded document: {e}")
            continue
        founded.append(info.to_founded())

    if dropped:
        logger.warning(f"Dropped {dropped}/{len(hits)} malformed hits")

    return founded
