"""
⚠️ DRAFT — requires crypto review before production use

Wire records for ECDSA membership proofs.

This module provides:
1. Signature - ECDSA signature over BabyJubJub
2. MerkleProof - fixed-depth inclusion proof
3. EfficientEcdsaInputs - R, T, U in Edwards form
4. ZKP / EcdsaMembershipProof - prover output bundled with public inputs
5. MembershipZKPInputs - flat input record of the membership circuit

Field names, field order and the depth of Merkle sequences match the
circuit's input layout and must not change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

try:
    import cbor2
except ImportError:
    raise ImportError(
        "cbor2 is required for proof serialization. "
        "Install with: pip install cbor2"
    )

from .config import (
    BASE_FIELD_MODULUS,
    PROOF_VERSION,
    SCALAR_FIELD_MODULUS,
    TREE_DEPTH,
)
from .curve import EdwardsPoint
from .exceptions import SerializationError
from .fields import parse_int


def require_scalar(value: Any, modulus: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label} must be int, got {type(value).__name__}")
    if not 0 <= value < modulus:
        raise ValueError(f"{label} out of range [0, {modulus}): {value}")
    return value


def _require_path(
    path_indices: Any, siblings: Any
) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    path_indices = tuple(path_indices)
    siblings = tuple(siblings)
    if len(path_indices) != TREE_DEPTH:
        raise ValueError(
            f"path_indices must have {TREE_DEPTH} entries, got {len(path_indices)}"
        )
    if len(siblings) != TREE_DEPTH:
        raise ValueError(
            f"siblings must have {TREE_DEPTH} entries, got {len(siblings)}"
        )
    for i, bit in enumerate(path_indices):
        if isinstance(bit, bool) or bit not in (0, 1):
            raise ValueError(f"path_indices[{i}] must be 0 or 1, got {bit!r}")
    for i, sibling in enumerate(siblings):
        require_scalar(sibling, BASE_FIELD_MODULUS, f"siblings[{i}]")
    return path_indices, siblings


# ============================================================================
# SIGNATURE
# ============================================================================


@dataclass(frozen=True)
class Signature:
    """
    ECDSA signature (r, s) over the BabyJubJub prime subgroup.

    Both scalars must lie in [0, n). Zero is accepted here; recovery fails
    naturally for degenerate values.
    """

    r: int
    s: int

    def __post_init__(self):
        require_scalar(self.r, SCALAR_FIELD_MODULUS, "r")
        require_scalar(self.s, SCALAR_FIELD_MODULUS, "s")

    def to_dict(self) -> dict:
        return {"r": str(self.r), "s": str(self.s)}

    @classmethod
    def from_dict(cls, data: dict) -> "Signature":
        return cls(parse_int(data["r"], "r"), parse_int(data["s"], "s"))


# ============================================================================
# MERKLE PROOF
# ============================================================================


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion proof for a depth-8 Merkle tree.

    Attributes:
        root: Tree root (base field element)
        path_indices: path_indices[i] is the target's bit at level i
            (0 = left child, 1 = right child)
        siblings: siblings[i] is the node combined with the path at level i
    """

    root: int
    path_indices: Tuple[int, ...]
    siblings: Tuple[int, ...]

    def __post_init__(self):
        require_scalar(self.root, BASE_FIELD_MODULUS, "root")
        path_indices, siblings = _require_path(self.path_indices, self.siblings)
        object.__setattr__(self, "path_indices", path_indices)
        object.__setattr__(self, "siblings", siblings)

    def to_dict(self) -> dict:
        return {
            "root": str(self.root),
            "pathIndices": list(self.path_indices),
            "siblings": [str(s) for s in self.siblings],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MerkleProof":
        try:
            return cls(
                root=parse_int(data["root"], "root"),
                path_indices=[parse_int(b, "pathIndices") for b in data["pathIndices"]],
                siblings=[parse_int(s, "siblings") for s in data["siblings"]],
            )
        except KeyError as exc:
            raise SerializationError(f"MerkleProof missing field {exc}") from exc


# ============================================================================
# EFFICIENT ECDSA PUBLIC INPUTS
# ============================================================================


@dataclass(frozen=True)
class EfficientEcdsaInputs:
    """R, T, U of the Efficient ECDSA formulation, in Edwards form."""

    R: EdwardsPoint
    T: EdwardsPoint
    U: EdwardsPoint

    def to_dict(self) -> dict:
        return {
            "R": self.R.to_dict(),
            "T": self.T.to_dict(),
            "U": self.U.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EfficientEcdsaInputs":
        return cls(
            R=EdwardsPoint.from_dict(data["R"]),
            T=EdwardsPoint.from_dict(data["T"]),
            U=EdwardsPoint.from_dict(data["U"]),
        )


# ============================================================================
# PROOF RECORDS
# ============================================================================


@dataclass(frozen=True)
class ZKP:
    """Opaque prover output (snarkjs layout: proof object + public signals)."""

    proof: Any
    public_signals: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(
            self, "public_signals", tuple(str(s) for s in self.public_signals)
        )

    def to_dict(self) -> dict:
        return {"proof": self.proof, "publicSignals": list(self.public_signals)}

    @classmethod
    def from_dict(cls, data: dict) -> "ZKP":
        return cls(proof=data.get("proof"), public_signals=data.get("publicSignals", ()))


@dataclass(frozen=True)
class EcdsaMembershipProof:
    """
    Proof that a BabyJubJub ECDSA signature comes from a member of a key set.

    The signature's s value never appears; the verifier checks the circuit
    proof against R, T, U and the message hash.

    Serialization:
        - Primary: CBOR with version field
        - Compatibility: JSON via to_dict()
    """

    R: EdwardsPoint
    T: EdwardsPoint
    U: EdwardsPoint
    msg_hash: int
    zkp: ZKP

    def __post_init__(self):
        require_scalar(self.msg_hash, SCALAR_FIELD_MODULUS, "msg_hash")

    def to_dict(self) -> dict:
        return {
            "R": self.R.to_dict(),
            "msgHash": str(self.msg_hash),
            "T": self.T.to_dict(),
            "U": self.U.to_dict(),
            "zkp": self.zkp.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EcdsaMembershipProof":
        try:
            return cls(
                R=EdwardsPoint.from_dict(data["R"]),
                T=EdwardsPoint.from_dict(data["T"]),
                U=EdwardsPoint.from_dict(data["U"]),
                msg_hash=parse_int(data["msgHash"], "msgHash"),
                zkp=ZKP.from_dict(data["zkp"]),
            )
        except KeyError as exc:
            raise SerializationError(
                f"EcdsaMembershipProof missing field {exc}"
            ) from exc

    def serialize(self) -> bytes:
        """
        Serialize the proof to CBOR bytes.

        Returns:
            bytes: CBOR-encoded proof with a version field

        Raises:
            SerializationError: If encoding fails
        """
        try:
            data = {"v": PROOF_VERSION, **self.to_dict()}
            return cbor2.dumps(data)
        except Exception as e:
            raise SerializationError(f"Failed to serialize proof: {e}") from e

    @classmethod
    def deserialize(cls, data: bytes) -> "EcdsaMembershipProof":
        """
        Deserialize a proof from CBOR bytes.

        Raises:
            SerializationError: If bytes are not valid CBOR, the version is
                unsupported or fields are missing
        """
        try:
            obj = cbor2.loads(data)
        except Exception as e:
            raise SerializationError(f"Failed to deserialize proof: {e}") from e

        if not isinstance(obj, dict):
            raise SerializationError("Invalid proof format: expected a map")

        version = obj.get("v", PROOF_VERSION)
        if version != PROOF_VERSION:
            raise SerializationError(
                f"Unsupported proof version: {version} (expected {PROOF_VERSION})"
            )

        return cls.from_dict(obj)


# ============================================================================
# CIRCUIT INPUTS
# ============================================================================


@dataclass(frozen=True)
class MembershipZKPInputs:
    """
    Inputs to the membership circuit.

    Mirrors the Spartan-ecdsa pubkey membership circuit inputs, plus
    nullifierRandomness for unique nullifiers. `s` is a private witness;
    T and U are public.
    """

    s: int
    root: int
    Tx: int
    Ty: int
    Ux: int
    Uy: int
    path_indices: Tuple[int, ...]
    siblings: Tuple[int, ...]
    nullifier_randomness: int

    FIELD_ORDER = (
        "s",
        "root",
        "Tx",
        "Ty",
        "Ux",
        "Uy",
        "pathIndices",
        "siblings",
        "nullifierRandomness",
    )

    def __post_init__(self):
        require_scalar(self.s, SCALAR_FIELD_MODULUS, "s")
        for label in ("root", "Tx", "Ty", "Ux", "Uy"):
            require_scalar(getattr(self, label), BASE_FIELD_MODULUS, label)
        require_scalar(
            self.nullifier_randomness, BASE_FIELD_MODULUS, "nullifier_randomness"
        )
        path_indices, siblings = _require_path(self.path_indices, self.siblings)
        object.__setattr__(self, "path_indices", path_indices)
        object.__setattr__(self, "siblings", siblings)

    def to_circuit_dict(self) -> Dict[str, Any]:
        """
        Circuit input JSON (snarkjs convention: scalars as decimal strings).

        Keys are emitted in FIELD_ORDER.
        """
        values: Dict[str, Any] = {
            "s": str(self.s),
            "root": str(self.root),
            "Tx": str(self.Tx),
            "Ty": str(self.Ty),
            "Ux": str(self.Ux),
            "Uy": str(self.Uy),
            "pathIndices": list(self.path_indices),
            "siblings": [str(s) for s in self.siblings],
            "nullifierRandomness": str(self.nullifier_randomness),
        }
        return {key: values[key] for key in self.FIELD_ORDER}

    def flatten(self) -> List[int]:
        """All scalars in FIELD_ORDER with sequences expanded in place."""
        flat: List[int] = [self.s, self.root, self.Tx, self.Ty, self.Ux, self.Uy]
        flat.extend(self.path_indices)
        flat.extend(self.siblings)
        flat.append(self.nullifier_randomness)
        return flat

    @classmethod
    def from_circuit_dict(cls, data: dict) -> "MembershipZKPInputs":
        missing = [key for key in cls.FIELD_ORDER if key not in data]
        if missing:
            raise SerializationError(f"circuit inputs missing fields: {missing}")
        return cls(
            s=parse_int(data["s"], "s"),
            root=parse_int(data["root"], "root"),
            Tx=parse_int(data["Tx"], "Tx"),
            Ty=parse_int(data["Ty"], "Ty"),
            Ux=parse_int(data["Ux"], "Ux"),
            Uy=parse_int(data["Uy"], "Uy"),
            path_indices=[parse_int(b, "pathIndices") for b in data["pathIndices"]],
            siblings=[parse_int(s, "siblings") for s in data["siblings"]],
            nullifier_randomness=parse_int(
                data["nullifierRandomness"], "nullifierRandomness"
            ),
        )
