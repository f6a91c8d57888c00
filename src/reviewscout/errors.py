"""Error taxonomy shared across identity resolution and recommendation."""


class ReviewScoutError(Exception):
    """Base class for all domain errors."""

    pass


class NotFoundError(ReviewScoutError):
    """Raised when an expected contributor or record is absent."""

    pass


class InvalidInputError(ReviewScoutError):
    """Raised when a request cannot be evaluated (bad timestamp, no files)."""

    pass


class StoreError(ReviewScoutError):
    """Raised when a query or write against the store fails."""

    pass
