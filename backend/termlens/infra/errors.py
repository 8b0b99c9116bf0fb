"""Exception taxonomy for the terminology engine.

Only malformed requests surface to callers (InputError and the feedback
errors). A failed match is never an exception.
"""


class TermlensError(Exception):
    """Base exception for the terminology engine."""


class ConfigurationError(TermlensError):
    """Raised at import time when an environment override is invalid."""


class InputError(TermlensError):
    """Empty or too-short query, unknown category, malformed batch."""


class BackingStoreUnavailable(TermlensError):
    """Candidate fetch or alias persistence failed.

    Always recovered locally (stale cache, empty candidates, skipped write).
    """


class FeedbackNotFoundError(TermlensError):
    """No feedback item with the given id."""


class FeedbackStateError(TermlensError):
    """Feedback item is no longer pending."""
