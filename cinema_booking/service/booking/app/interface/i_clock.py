from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Source of "now" for hold expiry and refund windows."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        pass
