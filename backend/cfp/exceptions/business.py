"""Business logic exceptions."""

from .base import CFPError


class ApplicationValidationError(CFPError):
    """Raised when a business rule rejects the input.

    Examples: end date not after start date, content language not in the
    activity's supported languages, duplicate content language.
    """

    pass


class ResourceNotFoundError(CFPError):
    """Raised when a requested resource cannot be found."""

    pass


class DuplicateResourceError(ApplicationValidationError):
    """Raised when a unique value (e.g. an activity slug) is already taken."""

    pass
