"""Domain error taxonomy."""


class DocSearchError(Exception):
    """Base exception for document search errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ServiceUnavailableError(DocSearchError):
    """Raised when a collaborator service can not be reached."""

    def __init__(self, message: str = "Service unavailable"):
        super().__init__(message)


class RequestTimeoutError(DocSearchError):
    """Raised when a collaborator did not answer in time."""

    def __init__(self, message: str = "Request timed out"):
        super().__init__(message)


class ServiceError(DocSearchError):
    """Raised when a collaborator returned a non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class IndexNotFoundError(DocSearchError):
    """Raised when the requested index does not exist."""


class DocumentNotFoundError(DocSearchError):
    """Raised when the requested document does not exist."""


class ValidationError(DocSearchError):
    """Raised on malformed input parameters."""


class SerdeError(DocSearchError):
    """Raised when a response does not match the expected shape."""


class InternalError(DocSearchError):
    """Raised when a programming invariant is violated."""


class CantSplitLargeDocumentsError(DocSearchError):
    """Raised when a document can not be divided on parts."""
