"""
Create a user (e.g. the first SUPER_ADMIN). Run from project root:
  python -m servdesk.scripts.create_user USERNAME PASSWORD [ROLE ...]
Example:
  python -m servdesk.scripts.create_user admin your-secure-password SUPER_ADMIN
"""
import argparse
import sys

from servdesk.core.database import SessionLocal
from servdesk.core.exceptions import ServDeskError
from servdesk.models.user import Role
from servdesk.services.policy import role_names, to_role_set
from servdesk.services.users import create_user


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a ServDesk user (no registration UI).")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "roles",
        nargs="*",
        help=f"One or more of {', '.join(r.value for r in Role)} (default: AGENT)",
    )
    args = parser.parse_args()

    try:
        roles = to_role_set(args.roles or [Role.AGENT])
    except ValueError:
        print(f"Unknown role in {args.roles}.", file=sys.stderr)
        return 1
    db = SessionLocal()
    try:
        user = create_user(db, args.username, args.password, roles)
        print(f"Created user '{user.username}' with roles {role_names(roles)}.")
        return 0
    except ServDeskError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
