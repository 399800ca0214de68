"""
core/errors.py

Two ways to go wrong: build the world badly, or misuse it while it runs.
"""


class ConfigurationError(ValueError):
    """Rejected at construction: bad radius, interval, timeout or ids."""


class InvariantViolation(RuntimeError):
    """A programming error. Not meant to be caught and recovered from."""
