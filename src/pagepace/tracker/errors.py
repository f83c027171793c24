"""Exceptions shared across the tracker."""


class ValidationError(ValueError):
    """Raised when an input is rejected before any computation.

    Covers negative quantities, malformed display values and progress
    updates that go the wrong direction.
    """

    pass


class PersistenceError(Exception):
    """Raised by the storage layer when a read or write fails.

    A failed write has been rolled back before this is raised.
    """

    pass
