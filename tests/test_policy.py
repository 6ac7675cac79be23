"""Unit tests for servdesk.services.policy: role-set predicates, route and action tables."""

import itertools
import unittest

from servdesk.models.user import Role
from servdesk.services.policy import (
    ACTION_ROLES,
    ADMIN_ROLES,
    ROLE_PERMISSIONS,
    ROUTE_ACCESS,
    SUPERVISOR_ROLES,
    _frozen_table,
    accessible_routes,
    can_access_route,
    can_perform,
    has_all_roles,
    has_any_role,
    has_permission,
    highest_role,
    permissions_for,
    required_roles_message,
    role_names,
    session_role_set,
    to_role_set,
)

AGENT = frozenset({Role.AGENT})
SUPERVISOR = frozenset({Role.SUPERVISOR})
ADMIN = frozenset({Role.ADMIN})
SUPER_ADMIN = frozenset({Role.SUPER_ADMIN})

ALL_ROLE_SETS = [
    frozenset(combo) for size in range(len(Role) + 1) for combo in itertools.combinations(Role, size)
]


class TestRoleSetPredicates(unittest.TestCase):
    """has_any_role / has_all_roles are plain set tests."""

    def test_has_any_role_intersection(self) -> None:
        self.assertTrue(has_any_role({Role.AGENT, Role.ADMIN}, ADMIN_ROLES))
        self.assertFalse(has_any_role(AGENT, ADMIN_ROLES))

    def test_has_any_role_empty_sets(self) -> None:
        self.assertFalse(has_any_role(frozenset(), ADMIN_ROLES))
        self.assertFalse(has_any_role(ADMIN, frozenset()))

    def test_has_all_roles_subset(self) -> None:
        self.assertTrue(has_all_roles({Role.AGENT, Role.ADMIN}, {Role.ADMIN}))
        self.assertFalse(has_all_roles(ADMIN, {Role.ADMIN, Role.AGENT}))

    def test_has_all_roles_empty_required_is_true(self) -> None:
        self.assertTrue(has_all_roles(frozenset(), frozenset()))

    def test_predicates_agree_with_set_algebra_for_every_pair(self) -> None:
        self.assertEqual(len(ALL_ROLE_SETS), 16)
        for held in ALL_ROLE_SETS:
            for required in ALL_ROLE_SETS:
                with self.subTest(held=role_names(held), required=role_names(required)):
                    self.assertEqual(has_any_role(held, required), not held.isdisjoint(required))
                    self.assertEqual(has_all_roles(held, required), required <= held)

    def test_permissions_are_cumulative_not_level_based(self) -> None:
        # A set holding only SUPER_ADMIN does not implicitly hold AGENT.
        self.assertFalse(has_all_roles(SUPER_ADMIN, AGENT))
        self.assertTrue(has_any_role(SUPER_ADMIN, ADMIN_ROLES))


class TestHighestRole(unittest.TestCase):
    def test_picks_top_of_hierarchy(self) -> None:
        self.assertEqual(highest_role({Role.AGENT, Role.SUPERVISOR}), Role.SUPERVISOR)
        self.assertEqual(highest_role({Role.AGENT, Role.SUPER_ADMIN}), Role.SUPER_ADMIN)

    def test_empty_set_has_no_display_role(self) -> None:
        self.assertIsNone(highest_role(frozenset()))


class TestRoleSetConstruction(unittest.TestCase):
    def test_to_role_set_accepts_names_and_members(self) -> None:
        self.assertEqual(to_role_set(["admin", Role.AGENT]), frozenset({Role.ADMIN, Role.AGENT}))

    def test_to_role_set_rejects_unknown_names(self) -> None:
        with self.assertRaises(ValueError):
            to_role_set(["OWNER"])

    def test_session_role_set_falls_back_to_agent(self) -> None:
        self.assertEqual(session_role_set([]), AGENT)

    def test_session_role_set_keeps_stored_roles(self) -> None:
        self.assertEqual(session_role_set(["SUPERVISOR"]), SUPERVISOR)

    def test_role_names_lowest_first(self) -> None:
        self.assertEqual(
            role_names({Role.SUPER_ADMIN, Role.AGENT, Role.ADMIN}),
            ["AGENT", "ADMIN", "SUPER_ADMIN"],
        )

    def test_required_roles_message(self) -> None:
        self.assertEqual(required_roles_message(ADMIN_ROLES), "ADMIN or SUPER_ADMIN")
        self.assertEqual(required_roles_message(SUPERVISOR_ROLES), "SUPERVISOR, ADMIN or SUPER_ADMIN")


class TestCanAccessRoute(unittest.TestCase):
    """Exact match, then closest registered ancestor, then any-role default."""

    def test_exact_match_allowed(self) -> None:
        self.assertTrue(can_access_route(ADMIN, "/dashboard/admin/users"))

    def test_exact_match_denied(self) -> None:
        self.assertFalse(can_access_route(AGENT, "/dashboard/admin/users"))

    def test_child_of_registered_route_inherits_parent_rule(self) -> None:
        self.assertFalse(can_access_route(AGENT, "/dashboard/admin/users/42"))
        self.assertTrue(can_access_route(ADMIN, "/dashboard/admin/users/42/edit"))

    def test_roles_route_is_super_admin_only(self) -> None:
        self.assertFalse(can_access_route(ADMIN, "/dashboard/admin/roles"))
        self.assertTrue(can_access_route(SUPER_ADMIN, "/dashboard/admin/roles"))

    def test_unregistered_route_is_open_to_any_role_by_default(self) -> None:
        self.assertTrue(can_access_route(AGENT, "/dashboard/brand-new-page"))
        self.assertTrue(can_access_route(AGENT, "/dashboard/admin/not-registered"))

    def test_unregistered_route_denied_without_roles(self) -> None:
        self.assertFalse(can_access_route(frozenset(), "/dashboard/brand-new-page"))

    def test_trailing_slash_and_query_ignored(self) -> None:
        self.assertFalse(can_access_route(AGENT, "/dashboard/inbox/team/?page=2"))
        self.assertTrue(can_access_route(SUPERVISOR, "/dashboard/inbox/team/"))

    def test_accessible_routes_respects_role_set(self) -> None:
        agent_routes = accessible_routes(AGENT)
        self.assertIn("/dashboard/inbox/my", agent_routes)
        self.assertNotIn("/dashboard/inbox/team", agent_routes)
        self.assertEqual(len(accessible_routes(SUPER_ADMIN | ADMIN)), len(ROUTE_ACCESS))


class TestActionsAndPermissions(unittest.TestCase):
    def test_can_perform_uses_action_table(self) -> None:
        self.assertTrue(can_perform(SUPERVISOR, "kb.articles.create"))
        self.assertFalse(can_perform(AGENT, "kb.articles.create"))
        self.assertFalse(can_perform(SUPERVISOR, "kb.articles.delete"))
        self.assertTrue(can_perform(ADMIN, "kb.articles.delete"))

    def test_unknown_action_is_denied(self) -> None:
        self.assertFalse(can_perform(SUPER_ADMIN, "kb.articles.teleport"))

    def test_only_super_admin_manages_roles(self) -> None:
        self.assertFalse(can_perform(ADMIN, "users.manage_roles"))
        self.assertTrue(can_perform(SUPER_ADMIN, "users.manage_roles"))

    def test_permission_keys_union_across_roles(self) -> None:
        roles = {Role.AGENT, Role.SUPERVISOR}
        self.assertTrue(has_permission(roles, "tickets.own"))
        self.assertTrue(has_permission(roles, "reports.team"))
        self.assertFalse(has_permission(roles, "kb.publish"))
        self.assertEqual(
            permissions_for(roles),
            ROLE_PERMISSIONS[Role.AGENT] | ROLE_PERMISSIONS[Role.SUPERVISOR],
        )


class TestPolicyTables(unittest.TestCase):
    def test_tables_are_read_only(self) -> None:
        with self.assertRaises(TypeError):
            ACTION_ROLES["kb.articles.read"] = ADMIN_ROLES  # type: ignore[index]
        with self.assertRaises(TypeError):
            ROUTE_ACCESS["/dashboard/x"] = ADMIN_ROLES  # type: ignore[index]

    def test_every_entry_allows_some_role(self) -> None:
        for table in (ACTION_ROLES, ROUTE_ACCESS):
            for key, roles in table.items():
                self.assertTrue(roles, key)

    def test_empty_entry_rejected(self) -> None:
        with self.assertRaises(ValueError):
            _frozen_table({"/dashboard/nobody": frozenset()})
