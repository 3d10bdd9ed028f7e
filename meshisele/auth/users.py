from __future__ import annotations

import logging
import os
import time
from typing import Any

import bcrypt

from .models import DefaultPreferences

logger = logging.getLogger(__name__)

_users: dict[str, dict[str, Any]] = {}


class UserExistsError(ValueError):
    """Raised when signing up with a username that is already taken."""


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(username: str, record: dict[str, Any]) -> dict[str, Any]:
    return {
        "username": username,
        "display_name": record["display_name"],
        "role": record["role"],
    }


def _create(username: str, password: str, role: str, display_name: str = "") -> None:
    _users[username] = {
        "password_hash": _hash_password(password),
        "role": role,
        "display_name": display_name or username,
        "created_at": time.time(),
        "preferences": DefaultPreferences(),
    }


def _seed_users() -> None:
    """Pre-seed a demo user and the admin account on import."""
    _create("user", "user123", "user")
    _create(
        os.getenv("MESHISELE_ADMIN_USERNAME", "admin"),
        os.getenv("MESHISELE_ADMIN_PASSWORD", "admin123"),
        "admin",
    )


def signup(username: str, password: str, display_name: str = "") -> dict[str, Any]:
    username = username.strip()
    if username in _users:
        raise UserExistsError(username)
    _create(username, password, "user", display_name.strip())
    logger.info("Created user %r", username)
    return _public(username, _users[username])


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, display_name, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return _public(username, record)
    return None


def user_exists(username: str) -> bool:
    return username in _users


def get_preferences(username: str) -> DefaultPreferences | None:
    record = _users.get(username)
    return record["preferences"] if record else None


def update_preferences(username: str, preferences: DefaultPreferences) -> DefaultPreferences | None:
    record = _users.get(username)
    if not record:
        return None
    record["preferences"] = preferences
    return preferences


def delete_user(username: str) -> bool:
    removed = _users.pop(username, None)
    if removed:
        logger.info("Deleted user %r", username)
    return removed is not None


_seed_users()
