"""Tests for servdesk.services.users: session resolution and role-set assignment."""

from unittest.mock import patch

from kb_fixtures import StoreTestCase

from servdesk.core.exceptions import ConflictError, ForbiddenError, ValidationFailedError
from servdesk.models import Role, User
from servdesk.services.users import create_user, list_users, resolve_session, set_user_roles


class TestResolveSession(StoreTestCase):
    def test_user_without_roles_resolves_to_agent(self) -> None:
        session = self.add_user("bare")
        self.assertEqual(session.roles, frozenset({Role.AGENT}))
        self.assertEqual(session.role, "AGENT")

    def test_multi_role_user_keeps_full_set(self) -> None:
        session = self.add_user("lead", Role.AGENT, Role.SUPERVISOR)
        self.assertEqual(session.roles, frozenset({Role.AGENT, Role.SUPERVISOR}))
        self.assertEqual(session.role, "SUPERVISOR")

    def test_disabled_flag_carried(self) -> None:
        self.assertFalse(self.add_user("gone", Role.ADMIN, is_active=False).is_active)


class TestSetUserRoles(StoreTestCase):
    def test_super_admin_replaces_role_set(self) -> None:
        user = set_user_roles(
            self.db, self.super_admin, self.agent.id, [Role.SUPERVISOR, Role.ADMIN]
        )
        self.assertEqual(
            resolve_session(user).roles, frozenset({Role.SUPERVISOR, Role.ADMIN})
        )
        stored = self.db.get(User, self.agent.id)
        self.assertEqual(stored.role_names, ["ADMIN", "SUPERVISOR"])

    def test_admin_cannot_manage_roles(self) -> None:
        with self.assertRaises(ForbiddenError):
            set_user_roles(self.db, self.admin, self.agent.id, [Role.ADMIN])

    def test_empty_set_rejected(self) -> None:
        with self.assertRaises(ValidationFailedError):
            set_user_roles(self.db, self.super_admin, self.agent.id, [])

    def test_admin_lists_users(self) -> None:
        self.assertEqual(len(list_users(self.db, self.admin)), 5)
        with self.assertRaises(ForbiddenError):
            list_users(self.db, self.supervisor)


class TestCreateUser(StoreTestCase):
    @patch("servdesk.services.users.hash_password", return_value="hashed")
    def test_creates_active_user_with_roles(self, _hash) -> None:
        user = create_user(self.db, "newbie", "long-enough-pw", [Role.SUPERVISOR])
        self.assertTrue(user.is_active)
        self.assertEqual(user.role_names, ["SUPERVISOR"])
        self.assertEqual(user.password_hash, "hashed")

    @patch("servdesk.services.users.hash_password", return_value="hashed")
    def test_duplicate_username_conflicts(self, _hash) -> None:
        with self.assertRaises(ConflictError):
            create_user(self.db, "agent", "long-enough-pw")

    def test_short_password_rejected(self) -> None:
        with self.assertRaises(ValidationFailedError) as ctx:
            create_user(self.db, "newbie", "short")
        self.assertIn("password", ctx.exception.errors)
