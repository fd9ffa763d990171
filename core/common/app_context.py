# core/common/app_context.py
"""
Global runtime context & service registry for PlantQC.

Holds the logged-in user (monitor, technician, supervisor) and shared
service instances. No GUI state lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Literal, Optional

from core.models.user import User

SessionEventType = Literal["login", "logout", "user_changed"]


@dataclass(frozen=True, slots=True)
class UserSessionEvent:
    """Represents a user session change event."""

    type: SessionEventType
    old_user: Optional[User]
    new_user: Optional[User]
    reason: str
    ts_utc: datetime


SessionObserver = Callable[[UserSessionEvent], None]


class AppContext:
    """Central runtime context."""

    current_user: Optional[User] = None

    # ---------- Service registry for DI -------------------------------
    services: dict[str, object] = {}

    _session_observers: list[SessionObserver] = []

    @classmethod
    def register_service(cls, name: str, instance: object) -> None:
        cls.services[name] = instance

    @classmethod
    def service(cls, name: str) -> object | None:
        return cls.services.get(name)

    # ---------- Session ------------------------------------------------
    @classmethod
    def get_current_user(cls) -> Optional[User]:
        return cls.current_user

    @classmethod
    def set_current_user(cls, user: Optional[User], *, reason: str = "") -> None:
        old = cls.current_user
        cls.current_user = user
        if user is None:
            kind: SessionEventType = "logout"
        elif old is None:
            kind = "login"
        else:
            kind = "user_changed"
        event = UserSessionEvent(
            type=kind,
            old_user=old,
            new_user=user,
            reason=reason,
            ts_utc=datetime.now(timezone.utc),
        )
        for observer in list(cls._session_observers):
            observer(event)

    @classmethod
    def clear_current_user(cls, *, reason: str = "") -> None:
        if cls.current_user is None:
            return
        cls.set_current_user(None, reason=reason)

    @classmethod
    def subscribe_user_session(cls, callback: SessionObserver) -> None:
        if callback not in cls._session_observers:
            cls._session_observers.append(callback)

    @classmethod
    def unsubscribe_user_session(cls, callback: SessionObserver) -> None:
        if callback in cls._session_observers:
            cls._session_observers.remove(callback)

    @classmethod
    def current_display_name(cls, fallback: str = "") -> str:
        user = cls.current_user
        return user.display_name if user is not None else fallback
