"""Role sets, permission tables, and the pure policy predicates.

Permissions are cumulative across assigned roles, so every gate is a set test
(intersection or subset) over the actor's RoleSet, never a comparison against a
single "level". The hierarchy order exists only to pick a display label.

Nothing here raises for a denied permission; callers translate False into
ForbiddenError (see servdesk.services.authorization).
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from servdesk.models.user import Role

RoleSet = frozenset[Role]

# Highest privilege first; used only by highest_role.
ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.SUPER_ADMIN,
    Role.ADMIN,
    Role.SUPERVISOR,
    Role.AGENT,
)

# Role assigned to an active session whose stored role set is empty.
DEFAULT_ROLE = Role.AGENT

ALL_ROLES: RoleSet = frozenset(Role)
SUPERVISOR_ROLES: RoleSet = frozenset({Role.SUPERVISOR, Role.ADMIN, Role.SUPER_ADMIN})
ADMIN_ROLES: RoleSet = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
SUPER_ADMIN_ROLES: RoleSet = frozenset({Role.SUPER_ADMIN})


def to_role_set(values: Iterable[Role | str]) -> RoleSet:
    """Build a RoleSet from enum members or their names. Unknown names raise ValueError."""
    return frozenset(v if isinstance(v, Role) else Role(str(v).strip().upper()) for v in values)


def session_role_set(values: Iterable[Role | str]) -> RoleSet:
    """RoleSet for an active session: the stored roles, or the lowest role when none are stored."""
    roles = to_role_set(values)
    return roles or frozenset({DEFAULT_ROLE})


def _frozen_table(entries: dict[str, Iterable[Role]]) -> Mapping[str, RoleSet]:
    """Freeze a policy table, rejecting entries with an empty allowed-role set."""
    frozen: dict[str, RoleSet] = {}
    for key, roles in entries.items():
        role_set = frozenset(roles)
        if not role_set:
            raise ValueError(f"Policy entry {key!r} must allow at least one role")
        frozen[key] = role_set
    return MappingProxyType(frozen)


# Coarse "may this actor call this operation at all" table.
ACTION_ROLES: Mapping[str, RoleSet] = _frozen_table(
    {
        "kb.articles.read": ALL_ROLES,
        "kb.articles.create": SUPERVISOR_ROLES,
        "kb.articles.update": SUPERVISOR_ROLES,
        "kb.articles.change_status": ADMIN_ROLES,
        "kb.articles.archive": SUPERVISOR_ROLES,
        "kb.articles.delete": ADMIN_ROLES,
        "kb.categories.read": ALL_ROLES,
        "kb.categories.manage": ADMIN_ROLES,
        "kb.tags.read": ALL_ROLES,
        "kb.tags.manage": ADMIN_ROLES,
        "users.list": ADMIN_ROLES,
        "users.manage_roles": SUPER_ADMIN_ROLES,
    }
)

_AGENT_UP = ALL_ROLES
_SUPERVISOR_UP = SUPERVISOR_ROLES
_ADMIN_UP = ADMIN_ROLES

# Dashboard route access. Unregistered paths fall back to the closest registered
# ancestor, and to "any authenticated actor" when no ancestor is registered.
ROUTE_ACCESS: Mapping[str, RoleSet] = _frozen_table(
    {
        "/dashboard/inbox/my": _AGENT_UP,
        "/dashboard/inbox/team": _SUPERVISOR_UP,
        "/dashboard/inbox/unassigned": _SUPERVISOR_UP,
        "/dashboard/inbox/escalations": _SUPERVISOR_UP,
        "/dashboard/inbox/sla-breach": _SUPERVISOR_UP,
        "/dashboard/inbox/waiting-on-customer": _AGENT_UP,
        "/dashboard/tickets/open": _AGENT_UP,
        "/dashboard/tickets/pending": _AGENT_UP,
        "/dashboard/tickets/on-hold": _AGENT_UP,
        "/dashboard/tickets/resolved": _AGENT_UP,
        "/dashboard/tickets/closed": _AGENT_UP,
        "/dashboard/tickets/trash": _SUPERVISOR_UP,
        "/dashboard/views": _AGENT_UP,
        "/dashboard/views/shared": _SUPERVISOR_UP,
        "/dashboard/views/new": _SUPERVISOR_UP,
        "/dashboard/knowledge-base/articles": _AGENT_UP,
        "/dashboard/knowledge-base/drafts": _SUPERVISOR_UP,
        "/dashboard/knowledge-base/categories": _ADMIN_UP,
        "/dashboard/knowledge-base/tags": _ADMIN_UP,
        "/dashboard/knowledge-base/requests": _SUPERVISOR_UP,
        "/dashboard/reports/team": _SUPERVISOR_UP,
        "/dashboard/reports/sla": _SUPERVISOR_UP,
        "/dashboard/reports/csat": _SUPERVISOR_UP,
        "/dashboard/reports/volume": _SUPERVISOR_UP,
        "/dashboard/reports/backlog": _SUPERVISOR_UP,
        "/dashboard/reports/export": _ADMIN_UP,
        "/dashboard/admin/queues": _ADMIN_UP,
        "/dashboard/admin/routing": _ADMIN_UP,
        "/dashboard/admin/slas": _ADMIN_UP,
        "/dashboard/admin/automation": _ADMIN_UP,
        "/dashboard/admin/macros": _ADMIN_UP,
        "/dashboard/admin/templates": _ADMIN_UP,
        "/dashboard/admin/tags": _ADMIN_UP,
        "/dashboard/admin/categories": _ADMIN_UP,
        "/dashboard/admin/users": _ADMIN_UP,
        "/dashboard/admin/roles": SUPER_ADMIN_ROLES,
        "/dashboard/admin/integrations": _ADMIN_UP,
        "/dashboard/settings/profile": _AGENT_UP,
        "/dashboard/settings/notifications": _AGENT_UP,
        "/dashboard/settings/preferences": _AGENT_UP,
        "/dashboard/settings/shortcuts": _AGENT_UP,
        "/dashboard/settings/security": _AGENT_UP,
        "/dashboard/settings/api-tokens": _ADMIN_UP,
    }
)

# Permission keys granted by each role. A RoleSet holds the union of its roles' keys.
ROLE_PERMISSIONS: Mapping[Role, frozenset[str]] = MappingProxyType(
    {
        Role.SUPER_ADMIN: frozenset(
            {
                "system.full_access",
                "system.security",
                "system.audit_logs",
                "users.manage_roles",
                "users.manage",
                "admin.all",
                "reports.all",
                "reports.export",
                "tickets.all",
                "tickets.assign",
                "kb.manage",
                "kb.publish",
                "kb.read",
                "views.manage",
                "views.read",
            }
        ),
        Role.ADMIN: frozenset(
            {
                "users.manage",
                "admin.tags",
                "admin.categories",
                "reports.all",
                "reports.export",
                "tickets.all",
                "tickets.assign",
                "kb.manage",
                "kb.publish",
                "kb.read",
                "views.manage",
                "views.read",
            }
        ),
        Role.SUPERVISOR: frozenset(
            {
                "reports.team",
                "reports.sla",
                "tickets.all",
                "tickets.assign",
                "kb.drafts",
                "kb.requests",
                "kb.read",
                "views.shared",
                "views.read",
            }
        ),
        Role.AGENT: frozenset(
            {
                "tickets.own",
                "tickets.handle",
                "kb.read",
                "views.read",
            }
        ),
    }
)


def has_any_role(actor_roles: Iterable[Role], required_roles: Iterable[Role]) -> bool:
    """True iff the actor's roles and the required roles intersect."""
    return not frozenset(actor_roles).isdisjoint(required_roles)


def has_all_roles(actor_roles: Iterable[Role], required_roles: Iterable[Role]) -> bool:
    """True iff every required role is held by the actor."""
    return frozenset(required_roles) <= frozenset(actor_roles)


def highest_role(actor_roles: Iterable[Role]) -> Role | None:
    """Highest role held, for display labels only. None for an empty set."""
    held = frozenset(actor_roles)
    for role in ROLE_HIERARCHY:
        if role in held:
            return role
    return None


def can_perform(actor_roles: Iterable[Role], action: str) -> bool:
    """True if the actor may perform a registered action. Unregistered actions are denied."""
    allowed = ACTION_ROLES.get(action)
    if allowed is None:
        return False
    return has_any_role(actor_roles, allowed)


def _normalize_path(path: str) -> str:
    path = (path or "").split("?", 1)[0].split("#", 1)[0].strip()
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def can_access_route(actor_roles: Iterable[Role], path: str) -> bool:
    """
    Route-level access: exact match first, then the closest registered ancestor.

    When neither the path nor any ancestor is registered, any actor with at least
    one role is allowed. New routes must be registered or they inherit open access.
    """
    roles = frozenset(actor_roles)
    route = _normalize_path(path)

    allowed = ROUTE_ACCESS.get(route)
    if allowed is not None:
        return has_any_role(roles, allowed)

    # "/dashboard/tickets/42".split("/") -> ["", "dashboard", "tickets", "42"];
    # stop before stripping down to the bare "/dashboard" root.
    segments = route.split("/")
    while len(segments) > 2:
        segments.pop()
        allowed = ROUTE_ACCESS.get("/".join(segments))
        if allowed is not None:
            return has_any_role(roles, allowed)

    return len(roles) > 0


def accessible_routes(actor_roles: Iterable[Role]) -> list[str]:
    """Registered routes the actor may open, in table order (for navigation menus)."""
    roles = frozenset(actor_roles)
    return [route for route, allowed in ROUTE_ACCESS.items() if has_any_role(roles, allowed)]


def has_permission(actor_roles: Iterable[Role], permission: str) -> bool:
    """True if any held role grants the permission key."""
    return any(permission in ROLE_PERMISSIONS.get(role, frozenset()) for role in actor_roles)


def permissions_for(actor_roles: Iterable[Role]) -> frozenset[str]:
    """Union of the permission keys of every held role."""
    granted: set[str] = set()
    for role in actor_roles:
        granted |= ROLE_PERMISSIONS.get(role, frozenset())
    return frozenset(granted)


def role_names(roles: Iterable[Role]) -> list[str]:
    """Role names ordered lowest to highest privilege (stable for messages and payloads)."""
    held = frozenset(roles)
    return [role.value for role in reversed(ROLE_HIERARCHY) if role in held]


def required_roles_message(required_roles: Iterable[Role]) -> str:
    """Human-readable list of roles that satisfy a gate, e.g. "ADMIN or SUPER_ADMIN"."""
    names = role_names(required_roles)
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " or " + names[-1]
