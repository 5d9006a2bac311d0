class SeatingError(Exception):
    """Base class for errors that abort a seating run."""


class MissingInput(SeatingError):
    """Raised when the roster or the hall plan is absent or empty."""


class InvalidHallPlan(SeatingError):
    """Raised for malformed hall plan data (blank names, bad counts, bad grid)."""
