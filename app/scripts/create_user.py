"""
Seed the fixed roles and create a user (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD EMAIL FIRST_NAME LAST_NAME [--role ADMIN ...]
Example:
  python -m app.scripts.create_user admin 'S3cure!pass' admin@example.com Site Admin --role ADMIN
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.exceptions import InfrastructureError
from app.core.security import PasswordPolicy, get_token_issuer
from app.models.role import UserRole
from app.services.auth import GRANTABLE_ROLES, AuthService
from app.stores.role_store import RoleStore
from app.stores.user_store import UserStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed roles and create a Timeshare Management user.")
    parser.add_argument("username", help="Username (letters, digits and -._@+)")
    parser.add_argument("password", help="Password (must satisfy the password policy)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("first_name", help="First name")
    parser.add_argument("last_name", help="Last name")
    parser.add_argument(
        "--role",
        action="append",
        default=[],
        choices=[r.value for r in GRANTABLE_ROLES],
        help="Extra role to grant; repeat for several",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    db = SessionLocal()
    try:
        service = AuthService(
            users=UserStore(db, PasswordPolicy.from_settings(settings)),
            roles=RoleStore(db),
            token_issuer=get_token_issuer(),
            db=db,
        )
        print(service.seed_roles().message)

        result = service.register(
            username=args.username.strip(),
            password=args.password,
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
        )
        if not result.succeeded:
            print(result.message, file=sys.stderr)
            return 1

        for role_name in args.role:
            granted = service.grant_role(args.username.strip(), UserRole(role_name))
            if not granted.succeeded:
                print(granted.message, file=sys.stderr)
                return 1
        roles = ", ".join([UserRole.USER.value, *args.role])
        print(f"Created user '{args.username.strip()}' with roles {roles}.")
        return 0
    except InfrastructureError as e:
        logger.error("User creation failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
