# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..curve import edwards_to_weierstrass, points_equal
from ..ecdsa import derive_inputs, private_key_to_public_key, sign
from ..exceptions import NoValidCandidateFoundError
from ..fields import Fs, field_inverse, parse_int
from ..hashing import Sha256FieldHasher
from ..merkle import generate_merkle_proof, verify_merkle_proof
from ..types import Signature
from ..weierstrass import base_mul, point_add, scalar_mul

VECTOR_FILE = Path(__file__).with_name("ecdsa_vectors.json")


def load_vectors(path: Path = VECTOR_FILE) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def compute_expected(vector: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sign one vector with its fixed nonce and derive R, T, U.

    Returns the signature, the derived inputs, the Weierstrass public key and
    the R point implied by the nonce.
    """
    name = vector.get("name", "<unnamed>")
    private_key = _require_int(vector.get("private_key"), f"{name}.private_key")
    nonce = _require_int(vector.get("nonce"), f"{name}.nonce")
    msg_hash = _require_int(vector.get("msg_hash"), f"{name}.msg_hash")

    sig = sign(msg_hash, private_key, nonce=nonce)
    pub_key = private_key_to_public_key(private_key)
    return {
        "signature": sig,
        "pub_key": pub_key,
        "msg_hash": msg_hash,
        "expected_R": base_mul(nonce).to_edwards(),
        "inputs": derive_inputs(sig, msg_hash, pub_key, max_workers=1),
    }


def validate_vectors(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if data.get("version") != "1.0":
        errors.append("version must be 1.0")
    if data.get("curve") != "babyjubjub":
        errors.append("curve must be babyjubjub")
    if data.get("hash") != "SHA-256":
        errors.append("hash must be SHA-256")

    vectors = data.get("vectors")
    if not isinstance(vectors, dict):
        errors.append("vectors must be a dict")
        return errors

    for vector in vectors.get("signatures", []):
        errors.extend(_validate_signature_vector(vector))
    for vector in vectors.get("corrupted", []):
        errors.extend(_validate_corrupted_vector(vector))
    if "merkle" in vectors:
        errors.extend(_validate_merkle_vector(vectors["merkle"]))

    return errors


def _validate_signature_vector(vector: Dict[str, Any]) -> List[str]:
    name = vector.get("name", "<unnamed>")
    try:
        expected = compute_expected(vector)
    except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
        return [f"{name}: {exc}"]

    errors: List[str] = []
    sig = expected["signature"]
    inputs = expected["inputs"]
    R = edwards_to_weierstrass(inputs.R)
    T = edwards_to_weierstrass(inputs.T)
    U = edwards_to_weierstrass(inputs.U)

    if inputs.R != expected["expected_R"]:
        errors.append(f"{name}: recovered R does not match nonce * G")
    if R.x % Fs.field_modulus != sig.r:
        errors.append(f"{name}: R.x mod n != r")

    r_inv = field_inverse(Fs(sig.r)).n
    if not points_equal(scalar_mul(R, r_inv), T):
        errors.append(f"{name}: T != r^-1 * R")
    if not points_equal(point_add(scalar_mul(T, sig.s), U), expected["pub_key"]):
        errors.append(f"{name}: s * T + U != public key")
    return errors


def _validate_corrupted_vector(vector: Dict[str, Any]) -> List[str]:
    name = vector.get("name", "<unnamed>")
    try:
        private_key = _require_int(vector.get("private_key"), f"{name}.private_key")
        nonce = _require_int(vector.get("nonce"), f"{name}.nonce")
        msg_hash = _require_int(vector.get("msg_hash"), f"{name}.msg_hash")
        verify_key = _require_int(
            vector.get("verify_with_private_key"), f"{name}.verify_with_private_key"
        )
        s_offset = _require_int(vector.get("s_offset", 0), f"{name}.s_offset")

        sig = sign(msg_hash, private_key, nonce=nonce)
        sig = Signature(sig.r, (sig.s + s_offset) % Fs.field_modulus)
        pub_key = private_key_to_public_key(verify_key)
    except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
        return [f"{name}: {exc}"]

    try:
        derive_inputs(sig, msg_hash, pub_key, max_workers=1)
    except NoValidCandidateFoundError:
        return []
    return [f"{name}: corrupted signature was accepted"]


def _validate_merkle_vector(vector: Dict[str, Any]) -> List[str]:
    try:
        keys = [
            private_key_to_public_key(_require_int(sk, "merkle.private_keys")).to_edwards()
            for sk in vector["private_keys"]
        ]
        index = _require_int(vector.get("index"), "merkle.index")
        hasher = Sha256FieldHasher()
        proof = generate_merkle_proof(keys, index, hasher, max_workers=1)
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        return [f"merkle: {exc}"]

    if not verify_merkle_proof(keys[index], proof, hasher):
        return ["merkle: proof does not verify"]
    return []


def _require_int(value: Any, field_name: str) -> int:
    if value is None:
        raise ValueError(f"{field_name} is required")
    return parse_int(value, field_name)
