"""
Base exception shared by every hod error.

Carries an optional compensation failure so that when a two-phase write
cannot roll back its first phase, the rollback error stays attached to the
error that is ultimately surfaced to the user.
"""

from __future__ import annotations


class HodError(Exception):
    """Base exception for all hod errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.compensation_error: BaseException | None = None
