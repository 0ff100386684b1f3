"""Error taxonomy shared by the repository, sync client and HTTP layer."""

from __future__ import annotations


class BlogError(RuntimeError):
    """Base class for blog failures that map onto an HTTP status."""

    status_code = 500
    default_message = "Blog operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(BlogError):
    """Lookup by id or slug matched nothing."""

    status_code = 404
    default_message = "Blog not found"


class ConflictError(BlogError):
    """Slug already taken by another blog."""

    status_code = 400
    default_message = "A blog with this slug already exists"


class BlogValidationError(BlogError):
    """Input is missing a required field or cannot produce a valid blog."""

    status_code = 400
    default_message = "Invalid blog data"


class StorageError(BlogError):
    """Reading or writing the durable store failed."""

    status_code = 500
    default_message = "Blog storage is unavailable"


class UpstreamError(BlogError):
    """The blog server refused a request for a reason other than bad input.

    Carries the server's status code (e.g. 429 when throttled).
    """

    status_code = 502
    default_message = "Blog server rejected the request"

    def __init__(
        self, message: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
