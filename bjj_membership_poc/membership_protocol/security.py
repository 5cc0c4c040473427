"""
⚠️ DRAFT — requires crypto review before production use

Security utilities for cryptographic operations.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.
"""

import os
import secrets
import hashlib
import hmac
from typing import Optional

from .config import SCALAR_FIELD_MODULUS, DOMAIN_SEPARATOR_PREFIX


# ============================================================================
# RANDOMNESS SOURCE (Fork-Safe)
# ============================================================================


class RandomnessSource:
    """
    Cryptographically secure randomness with fork detection.

    Prevents catastrophic nonce reuse if process forks.

    Example:
        >>> rng = RandomnessSource()
        >>> scalar = rng.get_random_scalar_mod_order()
        >>> # After fork, RNG automatically reinitializes
    """

    def __init__(self):
        """Initialize randomness source with fork detection."""
        self._pid = os.getpid()
        self._rng = secrets.SystemRandom()

    def get_random_scalar(self, max_value: int) -> int:
        """
        Get random scalar in [0, max_value).

        Args:
            max_value: Upper bound (exclusive)

        Returns:
            Random scalar in [0, max_value)
        """
        if os.getpid() != self._pid:
            self.__init__()
        return self._rng.randrange(0, max_value)

    def get_random_scalar_mod_order(self) -> int:
        """
        Get random scalar modulo the BabyJubJub subgroup order.

        Returns:
            Random scalar in [0, SCALAR_FIELD_MODULUS)
        """
        return self.get_random_scalar(SCALAR_FIELD_MODULUS)

    def get_nonzero_scalar_mod_order(self) -> int:
        """Random scalar in [1, SCALAR_FIELD_MODULUS), for keys and nonces."""
        return 1 + self.get_random_scalar(SCALAR_FIELD_MODULUS - 1)


# ============================================================================
# HASH FUNCTIONS
# ============================================================================


def hash_to_scalar(
    data: bytes,
    max_value: int = SCALAR_FIELD_MODULUS,
    domain_sep: Optional[bytes] = None,
) -> int:
    """
    Hash data to scalar in [0, max_value) with domain separation.

    Args:
        data: Data to hash (must be non-empty)
        max_value: Maximum value (exclusive, must be > 1)
        domain_sep: Optional domain separator

    Returns:
        Scalar in [0, max_value)

    Raises:
        ValueError: If inputs are invalid
        TypeError: If inputs are wrong type

    Security Note:
        Uses modulo reduction which introduces slight bias for
        non-power-of-2 max_value.
    """
    if not isinstance(data, bytes):
        raise TypeError(f"data must be bytes, got {type(data)}")

    if not data:
        raise ValueError("Data cannot be empty")

    if max_value <= 1:
        raise ValueError(f"max_value must be > 1, got {max_value}")

    if domain_sep is None:
        domain_sep = DOMAIN_SEPARATOR_PREFIX + b"MESSAGE"
    if not isinstance(domain_sep, bytes):
        raise TypeError(f"domain_sep must be bytes, got {type(domain_sep)}")

    digest = hashlib.sha256(domain_sep + data).digest()
    return int.from_bytes(digest, "big") % max_value


# ============================================================================
# CONSTANT-TIME OPERATIONS
# ============================================================================


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First byte string
        b: Second byte string

    Returns:
        True if a == b, False otherwise
    """
    return hmac.compare_digest(a, b)
