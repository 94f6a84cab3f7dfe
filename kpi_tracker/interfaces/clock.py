"""
Clock interface.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Source of "now" for one evaluation pass."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant."""
        pass
