from __future__ import annotations

import argparse
import getpass
import sys

from sqlalchemy import select

from contentboard.core.security import hash_password
from contentboard.db.session import SessionLocal
from contentboard.models.user import User, UserRole


def create_user(*, username: str, password: str, role: UserRole, email: str | None = None) -> User:
    """Create a user, or reset password and role when the username exists."""
    with SessionLocal() as db:
        user = db.scalar(select(User).where(User.username == username))
        if user is None:
            user = User(username=username, email=email, role=role, password_hash=hash_password(password))
            db.add(user)
        else:
            user.role = role
            user.password_hash = hash_password(password)
            if email:
                user.email = email
        db.commit()
        db.refresh(user)
        return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or update a ContentBoard user")
    parser.add_argument("username")
    parser.add_argument("--email", default=None)
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.editor.value)
    parser.add_argument("--password", default=None, help="prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("password must not be empty", file=sys.stderr)
        return 2

    user = create_user(username=args.username, password=password, role=UserRole(args.role), email=args.email)
    print(f"user {user.username} (id={user.id}, role={user.role.value})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
