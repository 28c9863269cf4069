"""
Exception classes for artwall.

Every error carries a stable ``kind`` so a front end can map it to its own
status codes without matching on class names.
"""


class ArtwallError(Exception):
    """Base exception for all artwall errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ArtwallError):
    """Raised when a required field is missing, empty or malformed."""

    kind = "validation"

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field} is required")
        self.field = field


class NotFoundError(ArtwallError):
    """Raised when a referenced post does not exist."""

    kind = "not_found"

    def __init__(self, post_id: str):
        super().__init__(f"post not found: {post_id}")
        self.post_id = post_id


class StorageError(ArtwallError):
    """Raised when the underlying dataset cannot be read or written."""

    kind = "storage"
