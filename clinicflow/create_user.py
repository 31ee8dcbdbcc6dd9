"""Create an application user that can log in to the API.

Usage:
    python -m clinicflow.create_user EMAIL NAME [--role admin|professional]

The password is read from the terminal.
"""
import argparse
import getpass
import sys

from clinicflow.core import config
from clinicflow.database import build_engine, build_session_factory, ensure_schema
from clinicflow.models import appointment_slot, patient, professional, service, user  # noqa: F401
from clinicflow.services.users import USER_ROLES, create_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a ClinicFlow API user.")
    parser.add_argument("email")
    parser.add_argument("name")
    parser.add_argument("--role", choices=sorted(USER_ROLES), default="professional")
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match.", file=sys.stderr)
        return 1

    engine = build_engine(config.DATABASE_URL)
    ensure_schema(engine)
    db = build_session_factory(engine)()
    try:
        created = create_user(db, name=args.name, email=args.email, password=password, role=args.role)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"Created {created.role} user {created.email} (id {created.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
