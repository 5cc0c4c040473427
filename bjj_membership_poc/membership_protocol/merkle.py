"""
Fixed-depth Merkle accumulator over BabyJubJub public keys.

Public keys are given in twisted Edwards form because the tree is only ever
opened inside the circuit, which works with Edwards points. Each key is hashed
to a leaf H(x, y); empty subtrees at level i hash to ZEROS[i], where
ZEROS[0] = 0 and ZEROS[i] = H(ZEROS[i-1], ZEROS[i-1]).

The depth is fixed at TREE_DEPTH = 8 so that every proof has the same size
regardless of how many keys are in the set.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from .config import MAX_LEAVES, REFERENCE_ZERO_HASHES, TREE_DEPTH
from .curve import EdwardsPoint
from .exceptions import ConfigurationError, IndexOutOfRangeError
from .feature_flags import get_worker_count
from .hashing import HashOracle, hash_edwards_public_key
from .types import MerkleProof

logger = logging.getLogger(__name__)


# ============================================================================
# ZERO-SUBTREE TABLE
# ============================================================================

_ZERO_HASHES: Dict[Hashable, Tuple[int, ...]] = {}
_ZERO_LOCK = threading.Lock()


def _compute_zero_hashes(hasher: HashOracle) -> Tuple[int, ...]:
    zeros = [0]
    for _ in range(1, TREE_DEPTH):
        zeros.append(hasher.hash_pair(zeros[-1], zeros[-1]))

    reference = REFERENCE_ZERO_HASHES.get(hasher.name)
    if reference is not None and tuple(zeros) != reference:
        raise ConfigurationError(
            f"merkle: hash oracle {hasher!r} does not reproduce the reference "
            f"zero table for {hasher.name!r}"
        )
    return tuple(zeros)


def zero_hashes(hasher: HashOracle) -> Tuple[int, ...]:
    """
    Per-level empty subtree hashes ZEROS[0..TREE_DEPTH).

    Computed once per oracle identity and shared process-wide.
    """
    key = hasher.cache_key
    zeros = _ZERO_HASHES.get(key)
    if zeros is not None:
        return zeros

    with _ZERO_LOCK:
        zeros = _ZERO_HASHES.get(key)
        if zeros is None:
            zeros = _compute_zero_hashes(hasher)
            _ZERO_HASHES[key] = zeros
            logger.debug("computed zero table for %r", hasher)
    return zeros


def clear_zero_hash_cache() -> None:
    with _ZERO_LOCK:
        _ZERO_HASHES.clear()


# ============================================================================
# TREE CONSTRUCTION
# ============================================================================


def hash_leaves(
    pub_keys: Sequence[EdwardsPoint],
    hasher: HashOracle,
    max_workers: Optional[int] = None,
) -> List[int]:
    """
    Hash every public key to a leaf, preserving order.

    Args:
        pub_keys: Public keys in Edwards form
        hasher: Hash oracle
        max_workers: Thread pool size; 1 hashes inline. Defaults to the
            BJJ_MEMBERSHIP_WORKERS flag.
    """
    workers = get_worker_count(max_workers)
    if workers == 1 or len(pub_keys) < 2:
        return [hash_edwards_public_key(pk, hasher) for pk in pub_keys]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(
            executor.map(lambda pk: hash_edwards_public_key(pk, hasher), pub_keys)
        )


def _check_index(index, size: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"index must be int, got {type(index).__name__}")
    if not 0 <= index < size:
        raise IndexOutOfRangeError(index, size)


def generate_merkle_proof(
    pub_keys: Sequence[EdwardsPoint],
    index: int,
    hasher: HashOracle,
    *,
    max_workers: Optional[int] = None,
) -> MerkleProof:
    """
    Generate an inclusion proof for pub_keys[index].

    Args:
        pub_keys: Public keys in Edwards form, at most MAX_LEAVES of them
        index: Position of the key to prove
        hasher: Hash oracle shared across calls
        max_workers: Thread pool size for leaf hashing

    Returns:
        MerkleProof with TREE_DEPTH path bits and siblings

    Raises:
        IndexOutOfRangeError: If index is not in [0, len(pub_keys))
        ValueError: If there are more than MAX_LEAVES keys

    Example:
        >>> hasher = get_cached_hash_oracle()
        >>> proof = generate_merkle_proof(keys, 3, hasher)
        >>> assert proof.path_indices[0] == 1
    """
    if len(pub_keys) > MAX_LEAVES:
        raise ValueError(
            f"merkle: depth-{TREE_DEPTH} tree holds at most {MAX_LEAVES} keys, "
            f"got {len(pub_keys)}"
        )
    _check_index(index, len(pub_keys))

    zeros = zero_hashes(hasher)
    layer = hash_leaves(pub_keys, hasher, max_workers)

    path_indices: List[int] = []
    siblings: List[int] = []
    position = index

    for level in range(TREE_DEPTH):
        path_indices.append(position % 2)
        sibling_index = position + 1 if position % 2 == 0 else position - 1
        if sibling_index >= len(layer):
            siblings.append(zeros[level])
        else:
            siblings.append(layer[sibling_index])
        position //= 2

        next_layer = []
        for j in range(0, len(layer), 2):
            right = layer[j + 1] if j + 1 < len(layer) else zeros[level]
            next_layer.append(hasher.hash_pair(layer[j], right))
        layer = next_layer

    logger.debug(
        "merkle proof for index %d over %d keys", index, len(pub_keys)
    )
    return MerkleProof(root=layer[0], path_indices=path_indices, siblings=siblings)


def compute_merkle_root(
    pub_keys: Sequence[EdwardsPoint],
    hasher: HashOracle,
    *,
    max_workers: Optional[int] = None,
) -> int:
    """
    Merkle root of a key set.

    The root does not depend on which leaf a proof is generated for, so this
    is the root of the proof for index 0.

    Raises:
        ValueError: If pub_keys is empty or too large
    """
    if len(pub_keys) == 0:
        raise ValueError("merkle: cannot build tree with zero public keys")
    return generate_merkle_proof(pub_keys, 0, hasher, max_workers=max_workers).root


# ============================================================================
# VERIFICATION
# ============================================================================


def compute_root_from_path(
    leaf: int,
    path_indices: Sequence[int],
    siblings: Sequence[int],
    hasher: HashOracle,
) -> int:
    """
    Fold a leaf up the tree along an authentication path.

    Bit 0 places the running node on the left, bit 1 on the right.
    """
    if len(path_indices) != len(siblings):
        raise ValueError("path_indices and siblings must have the same length")

    current = leaf
    for bit, sibling in zip(path_indices, siblings):
        if bit:
            current = hasher.hash_pair(sibling, current)
        else:
            current = hasher.hash_pair(current, sibling)
    return current


def verify_merkle_proof(
    pub_key: EdwardsPoint, proof: MerkleProof, hasher: HashOracle
) -> bool:
    """
    Check that pub_key is committed under proof.root.

    Returns:
        True if folding the path from H(pub_key) reproduces the root
    """
    leaf = hash_edwards_public_key(pub_key, hasher)
    root = compute_root_from_path(leaf, proof.path_indices, proof.siblings, hasher)
    return root == proof.root
