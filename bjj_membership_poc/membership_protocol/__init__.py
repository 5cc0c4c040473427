"""Public API for membership_protocol."""
from __future__ import annotations

from .curve import (
    EdwardsPoint,
    WeierstrassPoint,
    edwards_to_weierstrass,
    points_equal,
    weierstrass_to_edwards,
)
from .ecdsa import derive_inputs, private_key_to_public_key, sign
from .exceptions import (
    ConversionError,
    IndexOutOfRangeError,
    MembershipProtocolError,
    NoValidCandidateFoundError,
    NotOnCurveError,
)
from .factory import get_cached_hash_oracle, get_hash_oracle, register_hash_oracle
from .hashing import HashOracle, hash_edwards_public_key
from .inputs import assemble_membership_inputs
from .merkle import compute_merkle_root, generate_merkle_proof, verify_merkle_proof
from .prover import ProofGenerator, build_membership_proof, prepare_membership_inputs
from .types import (
    ZKP,
    EcdsaMembershipProof,
    EfficientEcdsaInputs,
    MembershipZKPInputs,
    MerkleProof,
    Signature,
)

__all__ = [
    "EdwardsPoint",
    "WeierstrassPoint",
    "edwards_to_weierstrass",
    "weierstrass_to_edwards",
    "points_equal",
    "sign",
    "derive_inputs",
    "private_key_to_public_key",
    "ConversionError",
    "IndexOutOfRangeError",
    "MembershipProtocolError",
    "NoValidCandidateFoundError",
    "NotOnCurveError",
    "HashOracle",
    "hash_edwards_public_key",
    "get_hash_oracle",
    "get_cached_hash_oracle",
    "register_hash_oracle",
    "compute_merkle_root",
    "generate_merkle_proof",
    "verify_merkle_proof",
    "assemble_membership_inputs",
    "ProofGenerator",
    "prepare_membership_inputs",
    "build_membership_proof",
    "Signature",
    "MerkleProof",
    "EfficientEcdsaInputs",
    "ZKP",
    "EcdsaMembershipProof",
    "MembershipZKPInputs",
]
