from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import bcrypt
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

logger = logging.getLogger(__name__)

_users: dict[str, dict[str, Any]] = {}

# username -> (role, environment variable holding the password)
SEED_ACCOUNTS: dict[str, tuple[str, str]] = {
    "user": ("user", "PROSPECTOR_USER_PASSWORD"),
    "admin": ("admin", "PROSPECTOR_ADMIN_PASSWORD"),
}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def add_user(username: str, password: str, role: str = "user") -> None:
    if not password:
        raise ValueError(f"Empty password for {username!r}")
    _users[username] = {"password_hash": _hash_password(password), "role": role}


def seed_users() -> list[str]:
    """
    Create the sales rep and admin accounts from the environment.

    An account whose password variable is unset or empty is not created, so
    there is no built-in password to log in with. Returns the seeded usernames.
    """
    seeded = []
    for username, (role, env_var) in SEED_ACCOUNTS.items():
        password = os.getenv(env_var, "")
        if not password:
            logger.warning("%s is not set; account %r is disabled", env_var, username)
            continue
        add_user(username, password, role=role)
        seeded.append(username)
    return seeded


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"]}
    return None


seed_users()
