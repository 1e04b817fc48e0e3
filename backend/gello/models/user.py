"""User model and role enum."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import field_validator

from gello.models.base import RowModel


class Role(str, Enum):
    """Closed set of user roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"

    @classmethod
    def parse(cls, value: Any) -> "Role | None":
        """Return the matching role, or None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class User(RowModel):
    """Profile row in ``public.users`` (mirrors the auth user id)."""

    id: UUID
    email: str
    display_name: str
    role: Role | None = Role.MEMBER
    team_id: UUID | None = None
    total_points: int = 0
    avatar_url: str | None = None
    created_at: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v: Any) -> Role | None:
        # Legacy or malformed role strings load as None and are denied everywhere.
        return Role.parse(v)

    @field_validator("total_points", mode="before")
    @classmethod
    def default_points(cls, v: Any) -> int:
        return 0 if v is None else v
