"""
Proof generation seam and end-to-end proof bundling.

The proving system itself is external. ProofGenerator is the narrow
interface this package calls; SnarkjsProofGenerator drives the snarkjs CLI
for circuits compiled with circom.
"""

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .config import BASE_FIELD_MODULUS
from .curve import EdwardsPoint, WeierstrassPoint
from .ecdsa import derive_inputs
from .exceptions import ProofGenerationError
from .hashing import HashOracle
from .inputs import assemble_membership_inputs
from .merkle import generate_merkle_proof
from .security import RandomnessSource
from .types import (
    ZKP,
    EcdsaMembershipProof,
    EfficientEcdsaInputs,
    MembershipZKPInputs,
    Signature,
)

logger = logging.getLogger(__name__)


class ProofGenerator(ABC):
    """Turns circuit inputs into an opaque zero-knowledge proof."""

    @abstractmethod
    def prove(self, inputs: MembershipZKPInputs) -> ZKP:
        """Generate a proof for the membership circuit."""


class SnarkjsProofGenerator(ProofGenerator):
    """
    Groth16 prover backed by `snarkjs groth16 fullprove`.

    Args:
        wasm_path: Witness generator compiled by circom
        zkey_path: Final proving key
        snarkjs: snarkjs executable
    """

    def __init__(
        self,
        wasm_path: str | Path,
        zkey_path: str | Path,
        snarkjs: str = "snarkjs",
    ) -> None:
        self.wasm_path = Path(wasm_path)
        self.zkey_path = Path(zkey_path)
        self.snarkjs = snarkjs

    def prove(self, inputs: MembershipZKPInputs) -> ZKP:
        with tempfile.TemporaryDirectory(prefix="bjj-membership-") as tmp:
            tmp_dir = Path(tmp)
            input_path = tmp_dir / "input.json"
            proof_path = tmp_dir / "proof.json"
            public_path = tmp_dir / "public.json"
            input_path.write_text(json.dumps(inputs.to_circuit_dict()))

            cmd = [
                self.snarkjs,
                "groth16",
                "fullprove",
                str(input_path),
                str(self.wasm_path),
                str(self.zkey_path),
                str(proof_path),
                str(public_path),
            ]
            logger.debug("running %s", " ".join(cmd))
            try:
                subprocess.run(cmd, check=True, capture_output=True, text=True)
            except FileNotFoundError as exc:
                raise ProofGenerationError(
                    f"snarkjs executable not found: {self.snarkjs!r}"
                ) from exc
            except subprocess.CalledProcessError as exc:
                raise ProofGenerationError(
                    f"snarkjs failed with exit code {exc.returncode}: "
                    f"{(exc.stderr or '').strip()}"
                ) from exc

            try:
                proof = json.loads(proof_path.read_text())
                public_signals = json.loads(public_path.read_text())
            except (OSError, ValueError) as exc:
                raise ProofGenerationError(f"unreadable snarkjs output: {exc}") from exc

        return ZKP(proof=proof, public_signals=public_signals)


def prepare_membership_inputs(
    pub_keys: Sequence[EdwardsPoint],
    index: int,
    sig: Signature,
    msg_hash: int,
    pub_key: WeierstrassPoint,
    hasher: HashOracle,
    *,
    nullifier_randomness: Optional[int] = None,
    rng: Optional[RandomnessSource] = None,
    max_workers: Optional[int] = None,
) -> Tuple[MembershipZKPInputs, EfficientEcdsaInputs]:
    """
    Build circuit inputs for the signer at pub_keys[index].

    Args:
        pub_keys: Key set in Edwards form
        index: Position of the signer's key in pub_keys
        sig: Signature over msg_hash
        msg_hash: Signed message hash
        pub_key: Signer's public key in Weierstrass form
        hasher: Hash oracle for the Merkle tree
        nullifier_randomness: Fixed randomness; drawn from rng when None

    Returns:
        (circuit inputs, R/T/U public inputs)

    Raises:
        ValueError: If pub_key is not the key stored at index
    """
    merkle_proof = generate_merkle_proof(
        pub_keys, index, hasher, max_workers=max_workers
    )
    if pub_key.to_edwards() != pub_keys[index]:
        raise ValueError(f"public key does not match key set entry {index}")

    sig_inputs = derive_inputs(sig, msg_hash, pub_key, max_workers=max_workers)

    if nullifier_randomness is None:
        rng = rng or RandomnessSource()
        nullifier_randomness = rng.get_random_scalar(BASE_FIELD_MODULUS)

    inputs = assemble_membership_inputs(
        merkle_proof, sig_inputs, msg_hash, sig.s, nullifier_randomness
    )
    return inputs, sig_inputs


def build_membership_proof(
    pub_keys: Sequence[EdwardsPoint],
    index: int,
    sig: Signature,
    msg_hash: int,
    pub_key: WeierstrassPoint,
    hasher: HashOracle,
    generator: ProofGenerator,
    *,
    nullifier_randomness: Optional[int] = None,
    rng: Optional[RandomnessSource] = None,
    max_workers: Optional[int] = None,
) -> EcdsaMembershipProof:
    """Prepare circuit inputs, run the prover and bundle the public values."""
    inputs, sig_inputs = prepare_membership_inputs(
        pub_keys,
        index,
        sig,
        msg_hash,
        pub_key,
        hasher,
        nullifier_randomness=nullifier_randomness,
        rng=rng,
        max_workers=max_workers,
    )
    zkp = generator.prove(inputs)
    return EcdsaMembershipProof(
        R=sig_inputs.R,
        T=sig_inputs.T,
        U=sig_inputs.U,
        msg_hash=msg_hash,
        zkp=zkp,
    )
