"""
user.py

Defines the central User model and plant roles.
Checklist forms read the current user to prefill monitor names; the
maintenance workflow uses the role to decide who may assign and validate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    """Roles known to the plant tools."""
    OPERATOR = "operator"
    QUALITY_MONITOR = "quality_monitor"
    TECHNICIAN = "technician"
    MAINTENANCE_SUPERVISOR = "maintenance_supervisor"
    ADMIN = "admin"


@dataclass(slots=True)
class User:
    id: int
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.OPERATOR
    areas: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    def has_role(self, *roles: UserRole) -> bool:
        return self.role == UserRole.ADMIN or self.role in roles
