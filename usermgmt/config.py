"""Configuration loading for the user management backend."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .models import UserRecord

DEFAULT_SERVICE_URL = "http://127.0.0.1:8000"


def env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_seed_users(seed_path: Path) -> List[UserRecord]:
    """Load the initial directory contents from a YAML file."""
    with seed_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict) or "users" not in raw:
        raise ValueError("Seed file must define a list of users under the 'users' key")

    users_raw = raw.get("users") or []
    if not isinstance(users_raw, list):
        raise ValueError("The 'users' key of the seed file must be a list")

    users: List[UserRecord] = []
    for index, item in enumerate(users_raw):
        if not isinstance(item, dict):
            raise ValueError(f"Seed entry #{index + 1} must be a mapping")
        users.append(UserRecord.from_dict(item))
    return users


def resolve_seed_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the seed file path, or ``None`` to use the built-in fixture."""
    if not env_value or not env_value.strip():
        return None
    return Path(env_value.strip()).expanduser().resolve(strict=False)


def resolve_service_url(env_value: Optional[str]) -> str:
    if env_value and env_value.strip():
        return env_value.strip().rstrip("/")
    return DEFAULT_SERVICE_URL


def seed_as_yaml(users: List[UserRecord]) -> str:
    """Render users in the seed file format."""
    payload: Dict[str, object] = {"users": [user.to_dict() for user in users]}
    return yaml.safe_dump(payload, sort_keys=False)


__all__ = [
    "DEFAULT_SERVICE_URL",
    "env_flag",
    "load_seed_users",
    "resolve_seed_path",
    "resolve_service_url",
    "seed_as_yaml",
]
