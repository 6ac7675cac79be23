"""Unit tests for servdesk.services.authorization: predicates turned into errors."""

import unittest

from kb_fixtures import actor

from servdesk.core.exceptions import AccountDisabledError, ForbiddenError
from servdesk.models.user import Role
from servdesk.services.authorization import authorize, authorize_action
from servdesk.services.policy import ADMIN_ROLES


class TestAuthorize(unittest.TestCase):
    def test_any_required_role_passes(self) -> None:
        authorize(actor(1, Role.AGENT, Role.ADMIN), ADMIN_ROLES)

    def test_denial_names_minimum_roles(self) -> None:
        with self.assertRaises(ForbiddenError) as ctx:
            authorize(actor(1, Role.SUPERVISOR), ADMIN_ROLES, "publish articles")
        self.assertEqual(ctx.exception.required_roles, ("ADMIN", "SUPER_ADMIN"))
        self.assertEqual(
            str(ctx.exception), "Forbidden: requires ADMIN or SUPER_ADMIN to publish articles"
        )

    def test_disabled_account_checked_before_roles(self) -> None:
        with self.assertRaises(AccountDisabledError):
            authorize(actor(1, Role.SUPER_ADMIN, is_active=False), ADMIN_ROLES)


class TestAuthorizeAction(unittest.TestCase):
    def test_registered_action_uses_action_table(self) -> None:
        authorize_action(actor(1, Role.SUPERVISOR), "kb.articles.create")
        with self.assertRaises(ForbiddenError) as ctx:
            authorize_action(actor(1, Role.AGENT), "kb.articles.create")
        self.assertEqual(
            ctx.exception.required_roles, ("SUPERVISOR", "ADMIN", "SUPER_ADMIN")
        )
        self.assertEqual(
            str(ctx.exception),
            "Forbidden: requires SUPERVISOR, ADMIN or SUPER_ADMIN to kb.articles.create",
        )

    def test_unknown_action_is_denied_for_everyone(self) -> None:
        with self.assertRaises(ForbiddenError) as ctx:
            authorize_action(actor(1, *Role), "kb.articles.teleport")
        self.assertEqual(ctx.exception.required_roles, ())
        self.assertEqual(str(ctx.exception), "Forbidden: no role is allowed to kb.articles.teleport")

    def test_disabled_account_rejected_for_any_action(self) -> None:
        with self.assertRaises(AccountDisabledError):
            authorize_action(actor(1, Role.SUPER_ADMIN, is_active=False), "kb.tags.read")
