"""
Hash oracle factory.

Oracle construction can be expensive (Poseidon implementations build large
constant tables), so callers build one instance and pass it to every Merkle
call. get_cached_hash_oracle() offers a process-wide shared default.
"""

from __future__ import annotations

import importlib
import logging
import threading
from typing import Dict, Final, Optional

from .exceptions import ConfigurationError
from .feature_flags import get_hash_oracle_name
from .hashing import HashOracle

logger = logging.getLogger(__name__)

HASH_ORACLE_REGISTRY: Final[Dict[str, str]] = {
    "sha256": "bjj_membership_poc.membership_protocol.hashing.Sha256FieldHasher",
    "blake2s": "bjj_membership_poc.membership_protocol.hashing.Blake2sFieldHasher",
}


def _format_valid_options() -> str:
    return ", ".join(sorted(HASH_ORACLE_REGISTRY.keys()))


def register_hash_oracle(name: str, import_path: str) -> None:
    """
    Register an oracle class under a name.

    Args:
        name: Lower-case oracle name (e.g. "poseidon")
        import_path: Dotted path "package.module.ClassName"; the class must
            subclass HashOracle and take no constructor arguments
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Invalid hash oracle name: {name!r}")
    module_path, _, class_name = import_path.rpartition(".")
    if not module_path or not class_name:
        raise ValueError(f"Invalid import path for {name!r}: {import_path!r}")
    HASH_ORACLE_REGISTRY[name.strip().lower()] = import_path


def _load_oracle_class(name: str) -> type[HashOracle]:
    import_path = HASH_ORACLE_REGISTRY[name]
    module_path, _, class_name = import_path.rpartition(".")

    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        raise ImportError(
            f"Unable to import hash oracle module {module_path!r} for {name!r}"
        ) from exc

    try:
        oracle_cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ImportError(
            f"Hash oracle class {class_name!r} not found in module "
            f"{module_path!r}"
        ) from exc

    if not isinstance(oracle_cls, type) or not issubclass(oracle_cls, HashOracle):
        raise TypeError(f"Hash oracle {import_path!r} does not implement HashOracle")

    return oracle_cls


def _resolve_oracle_name(
    *, prefer: str | None = None, override: str | None = None
) -> str:
    for source, value in (("override", override), ("prefer", prefer)):
        if value is None or value == "":
            continue
        name = value.strip().lower() if isinstance(value, str) else value
        if name not in HASH_ORACLE_REGISTRY:
            raise ConfigurationError(
                f"Invalid hash oracle from {source}: {value!r}. "
                f"Valid options: {_format_valid_options()}"
            )
        return name

    resolved_flag = get_hash_oracle_name()
    if resolved_flag not in HASH_ORACLE_REGISTRY:
        raise ConfigurationError(
            f"Invalid hash oracle from feature flags: {resolved_flag!r}. "
            f"Valid options: {_format_valid_options()}"
        )
    return resolved_flag


def get_hash_oracle(
    *, prefer: str | None = None, override: str | None = None
) -> HashOracle:
    """
    Build a new hash oracle instance based on feature flags.

    Args:
        prefer: Optional oracle name hint.
        override: Optional oracle name override (testing only).

    Returns:
        HashOracle: New oracle instance.

    Raises:
        ConfigurationError: If an oracle name is unknown.
        ImportError: If the oracle class cannot be imported.
        TypeError: If the class does not implement HashOracle.
    """
    name = _resolve_oracle_name(prefer=prefer, override=override)
    oracle = _load_oracle_class(name)()
    logger.debug("built hash oracle %r", oracle)
    return oracle


_ORACLE_CACHE: Optional[HashOracle] = None
_CACHE_LOCK = threading.Lock()


def get_cached_hash_oracle() -> HashOracle:
    """
    Shared default oracle, built on first use.

    Thread-safe using double-checked locking.
    """
    global _ORACLE_CACHE

    if _ORACLE_CACHE is not None:
        return _ORACLE_CACHE

    with _CACHE_LOCK:
        if _ORACLE_CACHE is None:
            _ORACLE_CACHE = get_hash_oracle()

    return _ORACLE_CACHE


def clear_hash_oracle_cache() -> None:
    global _ORACLE_CACHE

    with _CACHE_LOCK:
        _ORACLE_CACHE = None
