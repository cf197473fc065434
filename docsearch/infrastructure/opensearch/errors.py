"""Classification of OpenSearch failures into domain errors."""

import logging

import requests

from docsearch.core.errors import (
    DocSearchError,
    DocumentNotFoundError,
    IndexNotFoundError,
    RequestTimeoutError,
    ServiceError,
    ServiceUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_TYPES: dict[str, type[DocSearchError]] = {
    "index_not_found_exception": IndexNotFoundError,
    "document_missing_exception": DocumentNotFoundError,
    "document_not_found": DocumentNotFoundError,
    "validation_exception": ValidationError,
    "illegal_argument_exception": ValidationError,
    "parsing_exception": ValidationError,
    "timeout_exception": RequestTimeoutError,
}


def from_response(response: requests.Response) -> DocSearchError:
    """Build domain error from a non-2xx engine response."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        details = body.get("error")
        if isinstance(details, dict):
            return _from_details(details, status)

        if body.get("found") is False and "_id" in body:
            return DocumentNotFoundError(
                f"document [{body['_id']}] not found in index [{body.get('_index')}]"
            )

    return from_status(status, response.text or f"returned status {status}")


def from_status(status: int, message: str) -> DocSearchError:
    if status == 404:
        return IndexNotFoundError(message)
    if status == 400:
        return ValidationError(message)
    if status in (408, 504):
        return RequestTimeoutError(message)
    if status == 503:
        return ServiceUnavailableError(message)
    return ServiceError(message, status_code=status)


def from_transport(error: requests.RequestException) -> DocSearchError:
    """Build domain error from a transport failure."""
    if isinstance(error, requests.Timeout):
        return RequestTimeoutError(f"opensearch request timed out: {error}")
    if isinstance(error, requests.ConnectionError):
        return ServiceUnavailableError(f"opensearch is unavailable: {error}")
    return ServiceError(f"opensearch request failed: {error}")


def _from_details(details: dict, status: int) -> DocSearchError:
    root_causes = details.get("root_cause") or []
    reasons = [cause.get("reason", "") for cause in root_causes if isinstance(cause, dict)]
    message = ": ".join(r for r in reasons if r) or details.get("reason") or "unknown error"

    error_type = details.get("type", "")
    logger.debug(f"Engine error {error_type} ({status}): {message}")

    error_cls = ERROR_TYPES.get(error_type)
    if error_cls is not None:
        return error_cls(message)
    return from_status(status, message)
