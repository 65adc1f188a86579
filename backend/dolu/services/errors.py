"""
Domain exceptions raised by the service layer and translated to HTTP errors by the routes.
"""


class DoluError(Exception):
    """Base class for service-layer errors."""


class NotFoundError(DoluError):
    """A referenced row does not exist (or is not visible to the caller)."""


class BookingNotFoundError(NotFoundError):
    pass


class ConflictError(DoluError):
    """A write would violate a uniqueness rule."""


class ValidationFailedError(DoluError):
    """Input passed schema validation but breaks a business rule."""


class QuoteRejectedError(ValidationFailedError):
    """A booking was submitted without a successful price quote."""

    def __init__(self, error):
        self.error = error
        super().__init__(f"Cannot create booking without a valid price: {error}")


class InvalidTransitionError(ValidationFailedError):
    pass


class InvalidSettingError(DoluError):
    """A stored or submitted business setting does not match its schema."""


class TrackingIdExhaustedError(DoluError):
    """All 999 sequence numbers for the day are taken."""


class TrackingIdUnavailableError(DoluError):
    """Repeated unique-constraint conflicts while claiming a tracking id."""
