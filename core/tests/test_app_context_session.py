"""
core/tests/test_app_context_session.py

Basic unit tests for AppContext session API and observer mechanism.
Uses unittest to avoid external test dependencies.
"""

from __future__ import annotations

import unittest

from core.common.app_context import AppContext, UserSessionEvent
from core.models.user import User, UserRole


class TestAppContextSession(unittest.TestCase):
    def setUp(self) -> None:
        AppContext.clear_current_user(reason="test_setup")
        self._events: list[UserSessionEvent] = []

        def _cb(ev: UserSessionEvent) -> None:
            self._events.append(ev)

        self._cb = _cb
        AppContext.subscribe_user_session(self._cb)

    def tearDown(self) -> None:
        AppContext.unsubscribe_user_session(self._cb)
        AppContext.clear_current_user(reason="test_teardown")

    def test_login_event_emitted(self) -> None:
        u = User(id=1, username="maria", full_name="Maria Lopez", role=UserRole.QUALITY_MONITOR)
        AppContext.set_current_user(u, reason="login")
        self.assertEqual(AppContext.get_current_user(), u)
        ev = self._events[-1]
        self.assertEqual(ev.type, "login")
        self.assertIsNone(ev.old_user)
        self.assertEqual(ev.new_user.username, "maria")
        self.assertEqual(AppContext.current_display_name(), "Maria Lopez")

    def test_user_change_event_emitted(self) -> None:
        AppContext.set_current_user(User(id=1, username="maria"), reason="login")
        AppContext.set_current_user(User(id=2, username="jose"), reason="switch")
        ev = self._events[-1]
        self.assertEqual(ev.type, "user_changed")
        self.assertEqual(ev.old_user.username, "maria")
        self.assertEqual(ev.reason, "switch")

    def test_logout_event_emitted(self) -> None:
        AppContext.set_current_user(User(id=2, username="bob"), reason="login")
        AppContext.clear_current_user(reason="logout")
        self.assertIsNone(AppContext.get_current_user())
        ev = self._events[-1]
        self.assertEqual(ev.type, "logout")
        self.assertIsNotNone(ev.old_user)
        self.assertIsNone(ev.new_user)
        self.assertEqual(AppContext.current_display_name("nobody"), "nobody")

    def test_clear_without_user_is_silent(self) -> None:
        AppContext.clear_current_user(reason="noop")
        self.assertEqual(self._events, [])

    def test_unsubscribe_stops_events(self) -> None:
        AppContext.unsubscribe_user_session(self._cb)
        AppContext.set_current_user(User(id=3, username="carol"), reason="login")
        self.assertEqual(self._events, [])

    def test_admin_passes_every_role_check(self) -> None:
        admin = User(id=9, username="root", role=UserRole.ADMIN)
        tech = User(id=4, username="tec", role=UserRole.TECHNICIAN)
        self.assertTrue(admin.has_role(UserRole.MAINTENANCE_SUPERVISOR))
        self.assertTrue(tech.has_role(UserRole.TECHNICIAN))
        self.assertFalse(tech.has_role(UserRole.MAINTENANCE_SUPERVISOR))


if __name__ == "__main__":
    unittest.main()
