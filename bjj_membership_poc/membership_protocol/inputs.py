"""Assemble the flat membership circuit input record."""

from __future__ import annotations

from .config import SCALAR_FIELD_MODULUS
from .types import (
    EfficientEcdsaInputs,
    MembershipZKPInputs,
    MerkleProof,
    require_scalar,
)


def assemble_membership_inputs(
    merkle_proof: MerkleProof,
    sig_inputs: EfficientEcdsaInputs,
    msg_hash: int,
    s: int,
    nullifier_randomness: int,
) -> MembershipZKPInputs:
    """
    Combine a Merkle proof, Efficient ECDSA inputs and the witness scalars.

    Only T and U enter the circuit input record. R and msg_hash are public
    values carried by EcdsaMembershipProof; msg_hash is accepted here so the
    call site reads like the statement being proven.

    Raises:
        TypeError: If an argument has the wrong type
        ValueError: If a scalar is out of range
    """
    if not isinstance(merkle_proof, MerkleProof):
        raise TypeError(
            f"merkle_proof must be MerkleProof, got {type(merkle_proof).__name__}"
        )
    if not isinstance(sig_inputs, EfficientEcdsaInputs):
        raise TypeError(
            "sig_inputs must be EfficientEcdsaInputs, got "
            f"{type(sig_inputs).__name__}"
        )
    require_scalar(msg_hash, SCALAR_FIELD_MODULUS, "msg_hash")

    return MembershipZKPInputs(
        s=s,
        root=merkle_proof.root,
        Tx=sig_inputs.T.x,
        Ty=sig_inputs.T.y,
        Ux=sig_inputs.U.x,
        Uy=sig_inputs.U.y,
        path_indices=merkle_proof.path_indices,
        siblings=merkle_proof.siblings,
        nullifier_randomness=nullifier_randomness,
    )
