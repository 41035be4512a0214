"""
Base exception for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from TplUserError.

Programming errors and bugs should NOT inherit from TplUserError —
they will propagate with full tracebacks.
"""

from __future__ import annotations


class TplUserError(Exception):
    """
    Base class for all user-facing errors in tplexpr.

    These errors indicate problems that the user can fix:
    malformed templates, unknown filters, broken config files, etc.
    """
    pass


__all__ = ["TplUserError"]
