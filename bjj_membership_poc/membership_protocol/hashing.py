"""
Two-to-one hash oracles over the BabyJubJub base field.

The Merkle accumulator only needs a deterministic function H(a, b) -> Fb.
Oracles may compute in their own representation (a digest, a Montgomery-form
field element, ...): `apply` returns that handle and `canonicalize` turns it
into a plain integer in [0, p). The rest of the package only calls
`hash_pair`.

The digest-based oracles shipped here are NOT circuit compatible. Circuits
built with circomlib use Poseidon; register a Poseidon oracle under the name
"poseidon" (see factory.register_hash_oracle) to produce circuit inputs.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Any, Hashable

from .config import BASE_FIELD_MODULUS, DOMAIN_SEPARATORS, FIELD_ELEMENT_BYTES
from .curve import EdwardsPoint


class HashOracle(ABC):
    """
    Deterministic, side-effect free hash of two field elements.

    Implementations must be safe to share between threads.
    """

    name: str = "abstract"

    @abstractmethod
    def apply(self, left: int, right: int) -> Any:
        """Hash two field elements into an oracle-specific handle."""

    @abstractmethod
    def canonicalize(self, handle: Any) -> int:
        """Convert a handle returned by apply() into an int in [0, p)."""

    def hash_pair(self, left: int, right: int) -> int:
        return self.canonicalize(self.apply(left, right))

    @property
    def cache_key(self) -> Hashable:
        """
        Identity used to memoize values derived from this oracle.

        Covers the class and the instance attributes, so instances built with
        different parameters (round constants, domain tags) never share a
        memoized zero table. Oracles holding unhashable state must override
        this with a key that still encodes those parameters.
        """
        params = tuple(sorted(vars(self).items()))
        return (type(self).__module__, type(self).__qualname__, self.name, params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def _field_bytes(value: int, label: str) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label} must be int, got {type(value).__name__}")
    if not 0 <= value < BASE_FIELD_MODULUS:
        raise ValueError(f"{label} is not a base field element: {value}")
    return value.to_bytes(FIELD_ELEMENT_BYTES, "big")


class DigestFieldHasher(HashOracle):
    """
    hashlib digest of domain_sep || left || right, reduced into Fb.

    Inputs are encoded as fixed-width 32-byte big-endian integers, so the
    encoding is injective.
    """

    algorithm = "sha256"

    def __init__(self, domain_sep: bytes = DOMAIN_SEPARATORS["merkle_node"]):
        if not isinstance(domain_sep, bytes):
            raise TypeError(f"domain_sep must be bytes, got {type(domain_sep)}")
        # fail fast on algorithms hashlib does not provide
        hashlib.new(self.algorithm)
        self.domain_sep = domain_sep
        self.name = self.algorithm

    def apply(self, left: int, right: int) -> bytes:
        h = hashlib.new(self.algorithm)
        h.update(self.domain_sep)
        h.update(_field_bytes(left, "left"))
        h.update(_field_bytes(right, "right"))
        return h.digest()

    def canonicalize(self, handle: bytes) -> int:
        return int.from_bytes(handle, "big") % BASE_FIELD_MODULUS

    @property
    def cache_key(self) -> Hashable:
        return (type(self).__qualname__, self.algorithm, self.domain_sep)


class Sha256FieldHasher(DigestFieldHasher):
    algorithm = "sha256"


class Blake2sFieldHasher(DigestFieldHasher):
    algorithm = "blake2s"


def hash_edwards_public_key(pub_key: EdwardsPoint, hasher: HashOracle) -> int:
    """
    Merkle leaf for a public key: H(x, y) of its Edwards coordinates.

    Raises:
        TypeError: If pub_key is not an EdwardsPoint
    """
    if not isinstance(pub_key, EdwardsPoint):
        raise TypeError(
            f"public keys must be EdwardsPoint, got {type(pub_key).__name__}"
        )
    return hasher.hash_pair(pub_key.x, pub_key.y)
