"""
Stealth wallet errors.

A recovery mismatch is not an error: lookups return None instead.
"""


class StealthError(Exception):
    """Base class for stealth wallet failures."""


class StoreUnavailable(StealthError):
    """The secret store could not be read or written.

    Fatal to the calling operation. Nothing in the wallet retries or falls
    back to an in-memory seed; the caller decides whether to try again.
    """


class CounterResetRefused(StealthError):
    """Resetting the address counter was requested without acknowledging reuse."""
