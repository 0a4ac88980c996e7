from __future__ import annotations

import uuid
from typing import Any

import bcrypt

from ..errors import Conflict

ROLES = ("user", "shop_owner", "admin")

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record["id"],
        "name": record["name"],
        "email": record["email"],
        "role": record["role"],
    }


def _find_by_email(email: str) -> dict[str, Any] | None:
    email = email.strip().lower()
    for record in _users.values():
        if record["email"] == email:
            return record
    return None


def create_user(name: str, email: str, password: str, role: str = "user") -> dict[str, Any]:
    """Register a user. Returns ``{id, name, email, role}``."""
    if role not in ROLES:
        raise ValueError(f"unknown role {role!r}")
    if _find_by_email(email):
        raise Conflict("User already exists", message="User already exists")
    record = {
        "id": uuid.uuid4().hex,
        "name": name.strip(),
        "email": email.strip().lower(),
        "password_hash": _hash_password(password),
        "role": role,
        "suspended": False,
    }
    _users[record["id"]] = record
    return _public(record)


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{id, name, email, role}`` or ``None``."""
    record = _find_by_email(email)
    if record and _verify_password(password, record["password_hash"]):
        return _public(record)
    return None


def get_user(user_id: str) -> dict[str, Any] | None:
    record = _users.get(user_id)
    return _public(record) if record else None


def is_suspended(user_id: str) -> bool:
    record = _users.get(user_id)
    return bool(record and record["suspended"])


def set_suspended(user_id: str, suspended: bool) -> dict[str, Any] | None:
    record = _users.get(user_id)
    if record is None:
        return None
    record["suspended"] = suspended
    return {**_public(record), "suspended": suspended}


def user_id_for(email: str) -> str | None:
    record = _find_by_email(email)
    return record["id"] if record else None


def count_users() -> int:
    return len(_users)


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    create_user("Demo User", "user@example.com", "user123", "user")
    create_user("Sample Shop Owner", "owner@example.com", "owner123", "shop_owner")
    create_user("Admin", "admin@example.com", "admin123", "admin")


_seed_users()
