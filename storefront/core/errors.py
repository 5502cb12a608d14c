class StorefrontError(Exception):
    """Base class for every failure the storefront reports."""

    kind = "error"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(StorefrontError):
    """Empty required field, empty cart, or a step called from the wrong state."""

    kind = "validation"


class NotFoundError(StorefrontError):
    """A collaborator answered 404."""

    kind = "not_found"


class DependencyError(StorefrontError):
    """Any other network, processor or database failure. Never retried."""

    kind = "dependency"
