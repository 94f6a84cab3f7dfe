"""
User repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from kpi_tracker.models.user import User


class IUserRepository(ABC):
    """Abstract interface for user lookup."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def list_all(self) -> list[User]:
        """List all users."""
        pass

    @abstractmethod
    async def list_admins(self) -> list[User]:
        """List every administrator (escalation recipients)."""
        pass
