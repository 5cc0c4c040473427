"""
Runtime flags for the membership protocol.

Resolution order for every flag: explicit argument, in-memory override,
environment variable, default.
"""

from __future__ import annotations

import os
from typing import Final

from .config import DEFAULT_HASH_ORACLE

_HASH_ENV_VAR: Final[str] = "BJJ_MEMBERSHIP_HASH"
_WORKERS_ENV_VAR: Final[str] = "BJJ_MEMBERSHIP_WORKERS"
_DEFAULT_WORKERS: Final[int] = 1

_hash_override: str | None = None
_workers_override: int | None = None


def _normalize_hash_name(value: str | None) -> str | None:
    if value is None:
        return None

    if not isinstance(value, str):
        raise ValueError(f"Invalid hash oracle name: {value!r}")

    value = value.strip().lower()
    if value == "":
        return None

    return value


def _normalize_workers(value: int | str | None) -> int | None:
    if value is None:
        return None

    if isinstance(value, str):
        if value.strip() == "":
            return None
        try:
            value = int(value)
        except ValueError:
            raise ValueError(f"Invalid worker count: {value!r}") from None

    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Invalid worker count: {value!r}. Must be >= 1")

    return value


def get_hash_oracle_name(prefer: str | None = None) -> str:
    """
    Resolve the hash oracle name.

    Args:
        prefer: Optional preferred oracle name.

    Returns:
        Oracle name (not checked against the registry here).

    Raises:
        ValueError: If a provided value is invalid.
    """
    preferred = _normalize_hash_name(prefer)
    if preferred is not None:
        return preferred

    if _hash_override is not None:
        return _hash_override

    env_value = _normalize_hash_name(os.getenv(_HASH_ENV_VAR))
    if env_value is not None:
        return env_value

    return DEFAULT_HASH_ORACLE


def set_hash_oracle_name(value: str | None) -> None:
    """Set in-memory oracle override (testing only)."""
    global _hash_override
    _hash_override = _normalize_hash_name(value)


def get_worker_count(prefer: int | None = None) -> int:
    """
    Resolve the thread pool size for leaf hashing and candidate checks.

    Raises:
        ValueError: If a provided value is invalid.
    """
    preferred = _normalize_workers(prefer)
    if preferred is not None:
        return preferred

    if _workers_override is not None:
        return _workers_override

    env_value = _normalize_workers(os.getenv(_WORKERS_ENV_VAR))
    if env_value is not None:
        return env_value

    return _DEFAULT_WORKERS


def set_worker_count(value: int | None) -> None:
    """Set in-memory worker override (testing only)."""
    global _workers_override
    _workers_override = _normalize_workers(value)
