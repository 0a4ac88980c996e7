from __future__ import annotations

from fastapi import HTTPException, Request

from .users import get_user, is_suspended


def get_current_user(request: Request) -> dict | None:
    """Return the user dict from the session, or ``None``."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in, 403 if the account is suspended."""
    user = request.session.get("user")
    if not user or get_user(user["id"]) is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if is_suspended(user["id"]):
        raise HTTPException(status_code=403, detail="Account suspended")
    return user


def require_shop_owner(request: Request) -> dict:
    """Raise 403 unless the user owns shops or is an admin."""
    user = require_user(request)
    if user.get("role") not in ("shop_owner", "admin"):
        raise HTTPException(status_code=403, detail="Shop owner access required")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    user = require_user(request)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
