from __future__ import annotations

from fastapi import HTTPException, Request

from .users import user_exists


def require_user(request: Request) -> dict:
    """Session user, or 401 when nobody is logged in or the account is gone."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not user_exists(user["username"]):
        request.session.clear()
        raise HTTPException(status_code=401, detail="Account no longer exists")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    user = require_user(request)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
