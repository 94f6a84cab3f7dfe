"""
User models used for reminder recipients.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """A user who owns KPIs or receives escalations."""

    id: str
    email: str = Field(..., max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)
    is_admin: bool = False

    class Config:
        from_attributes = True

    @property
    def name(self) -> str:
        """Display name, falling back to the e-mail address."""
        return self.display_name or self.email
