"""
Time budget for a single service operation.
"""
import time
from typing import Optional

from app.core.config import settings
from app.core.errors import InternalError


class Deadline:
    """Monotonic deadline checked between database round trips."""

    def __init__(self, timeout: Optional[float] = None):
        if timeout is None:
            timeout = settings.REQUEST_TIMEOUT_SECONDS
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout if timeout and timeout > 0 else None

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when unbounded."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def check(self, step: str = "") -> None:
        """Raise InternalError if the budget is spent."""
        if self.expired:
            raise InternalError(f"deadline_exceeded{':' + step if step else ''}")


def ensure_deadline(deadline: Optional[Deadline]) -> Deadline:
    """Use the caller's deadline or start one from settings."""
    return deadline if deadline is not None else Deadline()
