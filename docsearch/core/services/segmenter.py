"""Segmenter - divides large documents on overlapping parts."""

import logging
import math

from ..errors import CantSplitLargeDocumentsError, ValidationError
from ..models.document import DocumentPart, LargeDocument

logger = logging.getLogger(__name__)

FIRST_DOCUMENT_PART_ID = 0


def overlap_width(max_part_size: int, overlap_rate: float) -> int:
    """Number of characters shared by adjacent parts."""
    return math.floor(overlap_rate * max_part_size)


def parts_amount(content_length: int, max_part_size: int, overlap_rate: float = 0.0) -> int:
    """Number of parts ``divide`` produces for content of given length."""
    if max_part_size == 0 or max_part_size >= content_length:
        return 1
    step = max_part_size - overlap_width(max_part_size, overlap_rate)
    return math.ceil(content_length / step)


def divide(
    document: LargeDocument,
    max_part_size: int,
    overlap_rate: float = 0.0,
) -> list[DocumentPart]:
    """Divide document content on parts bounded by ``max_part_size``.

    Every part except the first one starts with the last
    ``floor(overlap_rate * max_part_size)`` characters of the previous
    part, so part ``i`` covers ``content[i*step - overlap:(i+1)*step]``.

    Args:
        document: Document to divide.
        max_part_size: Max characters per part, 0 disables dividing.
        overlap_rate: Fraction of ``max_part_size`` shared by adjacent parts,
            at most half of it.

    Returns:
        Parts ordered by ``doc_part_id`` starting from 0.

    Raises:
        ValidationError: Invalid size or overlap rate, or overlap wider
            than the rest of a part.
        CantSplitLargeDocumentsError: Content is empty.
    """
    if max_part_size < 0:
        raise ValidationError(f"max part size must not be negative: {max_part_size}")

    if not 0.0 <= overlap_rate < 1.0:
        raise ValidationError(f"overlap rate must be in [0, 1): {overlap_rate}")

    # part i shares the whole overlap with part i-1 only while overlap fits in a step
    overlap = overlap_width(max_part_size, overlap_rate)
    step = max_part_size - overlap
    if overlap > step:
        raise ValidationError(
            f"overlap {overlap} exceeds part step {step}: "
            f"overlap rate {overlap_rate} is too large for max part size {max_part_size}"
        )

    content = document.content
    if max_part_size > 0 and not content:
        raise CantSplitLargeDocumentsError(
            f"document content is empty: {document.file_path}"
        )

    amount = parts_amount(len(content), max_part_size, overlap_rate)
    if amount == 1:
        return [_build_part(document, document.large_doc_id, FIRST_DOCUMENT_PART_ID, content)]

    large_doc_id = document.large_doc_id
    parts = []
    for doc_part_id in range(amount):
        own_start = doc_part_id * step
        start = max(0, own_start - overlap)
        end = min(own_start + step, len(content))
        parts.append(_build_part(document, large_doc_id, doc_part_id, content[start:end]))

    logger.debug(
        f"Divided {document.file_name}: {len(content)} chars -> {amount} parts "
        f"(max={max_part_size}, overlap={overlap})"
    )
    return parts


def _build_part(
    document: LargeDocument, large_doc_id: str, doc_part_id: int, content: str
) -> DocumentPart:
    return DocumentPart(
        large_doc_id=large_doc_id,
        doc_part_id=doc_part_id,
        file_name=document.file_name,
        file_path=document.file_path,
        file_size=document.file_size,
        created_at=document.created_at,
        modified_at=document.modified_at,
        content=content,
        metadata=document.metadata,
    )
