from __future__ import annotations

import argparse
from typing import Optional, Sequence

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from memberdues.auth.security import hash_password
from memberdues.core.db import SessionLocal
from memberdues.models.user import User

# Same rule the login form applies, so a seeded admin can always sign in.
_email_adapter = TypeAdapter(EmailStr)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or reset an administrator account.")
    parser.add_argument("--email", required=True, help="Login email for the administrator")
    parser.add_argument("--password", required=True, help="Initial password (at least 6 characters)")
    return parser.parse_args(argv)


def create_or_reset_admin(session: Session, email: str, password: str) -> tuple[User, str]:
    try:
        email = _email_adapter.validate_python(email)
    except ValidationError as exc:
        raise ValueError(f"Invalid email {email!r}: {exc.errors()[0]['msg']}") from exc
    if len(password) < 6:
        raise ValueError("Password must be at least 6 characters")

    user = session.query(User).filter(func.lower(User.email) == email.lower()).first()
    if user is None:
        user = User(email=email, hashed_password=hash_password(password), role="admin")
        session.add(user)
        action = "created"
    else:
        if user.role != "admin":
            raise ValueError(f"{email} belongs to a member account")
        user.hashed_password = hash_password(password)
        action = "updated"
    session.commit()
    session.refresh(user)
    return user, action


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    with SessionLocal() as session:
        try:
            user, action = create_or_reset_admin(session, args.email, args.password)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        print(f"Admin {user.email} {action} (id={user.id})")


if __name__ == "__main__":
    main()
