"""Errors raised by the table and the turn controller.

Both kinds are raised before any state changes, so a rejected call leaves the
table exactly as it was.
"""


class IllegalStateError(RuntimeError):
    """Operation attempted outside its legal phase or turn."""


class IllegalArgumentError(ValueError):
    """Malformed request: bad amounts, unaffordable bets, invalid blinds."""
