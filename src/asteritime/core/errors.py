# src/asteritime/core/errors.py

from __future__ import annotations

"""
Error taxonomy.

- ValidationError: rejected locally, before any network call.
- NetworkError: the backend could not be reached.
- ServerRejection: the backend answered with a non-2xx status.

ServerRejection subclasses NetworkError so the reconciliation loop can treat
"unreachable" and "rejected" the same way (log and retry next tick).
"""


class AsteriError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(AsteriError, ValueError):
    """Illegal request (bad transition, missing title, ...). Never retried."""


class NetworkError(AsteriError):
    """Transport-level failure talking to the task backend."""


class ServerRejection(NetworkError):
    """Backend responded with a non-2xx status code."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = int(status_code)
        self.message = (message or "").strip()
        text = self.message or f"server rejected request (HTTP {self.status_code})"
        super().__init__(text)
