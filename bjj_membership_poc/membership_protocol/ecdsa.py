"""
⚠️ DRAFT — requires crypto review before production use

ECDSA over BabyJubJub and the Efficient ECDSA public input derivation.

Efficient ECDSA (https://personaelabs.org/posts/efficient-ecdsa-1/) rewrites
the verification equation so that a circuit never receives the signature as
(r, s) in the clear:

    T = r^-1 * R
    U = -(r^-1 * m) * G
    s * T + U == Q

The circuit proves knowledge of s for public T, U; R, T, U and m are public.

Only r = R.x mod n is known, so R must be recovered. BabyJubJub has cofactor
8, so R.x may be any of r + i*n for i in [0, 8), and each x gives two
candidate y values. Candidates are tried in a fixed order (i ascending, even
parity first) and the first one that satisfies the equation wins.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Optional, Tuple

from .config import BASE_FIELD_MODULUS, COFACTOR, SCALAR_FIELD_MODULUS
from .curve import WeierstrassPoint, points_equal, weierstrass_to_edwards
from .exceptions import CryptographicError, NoValidCandidateFoundError
from .feature_flags import get_worker_count
from .fields import Fs, field_inverse
from .security import RandomnessSource
from .types import EfficientEcdsaInputs, Signature, require_scalar
from .weierstrass import base_mul, point_add, point_from_x, scalar_mul

logger = logging.getLogger(__name__)

_PARITIES = (0, 1)


# ============================================================================
# KEYS AND SIGNING
# ============================================================================


def generate_private_key(rng: Optional[RandomnessSource] = None) -> int:
    """Random private key in [1, n)."""
    rng = rng or RandomnessSource()
    return rng.get_nonzero_scalar_mod_order()


def private_key_to_public_key(private_key: int) -> WeierstrassPoint:
    """
    Public key Q = sk * G in Weierstrass form.

    Raises:
        ValueError: If private_key is not in [1, n)
    """
    if isinstance(private_key, bool) or not isinstance(private_key, int):
        raise TypeError("private_key must be int")
    if not 0 < private_key < SCALAR_FIELD_MODULUS:
        raise ValueError("private_key must be in [1, n)")
    return base_mul(private_key)


def sign(
    msg_hash: int,
    private_key: int,
    *,
    nonce: Optional[int] = None,
    rng: Optional[RandomnessSource] = None,
) -> Signature:
    """
    Standard ECDSA signature over the BabyJubJub prime subgroup.

    R = k*G, r = R.x mod n, s = k^-1 * (m + r*sk) mod n

    Args:
        msg_hash: Message hash in [0, n)
        private_key: Signing key in [1, n)
        nonce: Fixed nonce k (deterministic test vectors only)
        rng: Randomness source for k when nonce is None

    Raises:
        ValueError: If msg_hash is not in [0, n)
        CryptographicError: If a supplied nonce yields r == 0 or s == 0
    """
    require_scalar(msg_hash, SCALAR_FIELD_MODULUS, "msg_hash")
    private_key_to_public_key(private_key)  # validates the key
    m = Fs(msg_hash)
    sk = Fs(private_key)
    rng = rng or RandomnessSource()

    while True:
        k = nonce if nonce is not None else rng.get_nonzero_scalar_mod_order()
        if not 0 < k < SCALAR_FIELD_MODULUS:
            raise ValueError("nonce must be in [1, n)")

        R = base_mul(k)
        r = Fs(R.x)
        s = field_inverse(Fs(k)) * (m + r * sk)
        if r.n != 0 and s.n != 0:
            return Signature(r=r.n, s=s.n)

        if nonce is not None:
            raise CryptographicError("signing: supplied nonce gives r == 0 or s == 0")
        logger.debug("signing: degenerate nonce, retrying")


# ============================================================================
# EFFICIENT ECDSA INPUTS
# ============================================================================


def _candidates() -> Iterator[Tuple[int, int]]:
    for i in range(COFACTOR):
        for parity in _PARITIES:
            yield i, parity


def _check_candidate(
    i: int,
    parity: int,
    sig: Signature,
    r_inv: int,
    U: Optional[WeierstrassPoint],
    pub_key: WeierstrassPoint,
) -> Optional[Tuple[WeierstrassPoint, WeierstrassPoint]]:
    x = (sig.r + i * SCALAR_FIELD_MODULUS) % BASE_FIELD_MODULUS
    R = point_from_x(x, parity)
    if R is None:
        logger.debug("recovery: no point for i=%d parity=%d", i, parity)
        return None

    T = scalar_mul(R, r_inv)
    check = point_add(scalar_mul(T, sig.s), U)
    if check is None or not points_equal(check, pub_key):
        return None
    return R, T


def derive_inputs(
    sig: Signature,
    msg_hash: int,
    pub_key: WeierstrassPoint,
    *,
    max_workers: Optional[int] = None,
) -> EfficientEcdsaInputs:
    """
    Recover R and compute T, U for a signature, in Edwards form.

    Args:
        sig: Signature (r, s)
        msg_hash: Signed message hash in [0, n)
        pub_key: Signer's public key in Weierstrass form
        max_workers: Thread pool size for candidate checks; 1 checks
            candidates inline. Defaults to the BJJ_MEMBERSHIP_WORKERS flag.

    Returns:
        EfficientEcdsaInputs with R, T, U as Edwards points

    Raises:
        ValueError: If msg_hash is not in [0, n)
        NoValidCandidateFoundError: If no candidate R satisfies s*T + U == Q
        ZeroDivisionError: If sig.r == 0
        ConversionError: If R, T or U cannot be mapped to Edwards form
    """
    if not isinstance(sig, Signature):
        raise TypeError(f"sig must be Signature, got {type(sig).__name__}")
    if not isinstance(pub_key, WeierstrassPoint):
        raise TypeError(
            f"pub_key must be WeierstrassPoint, got {type(pub_key).__name__}"
        )
    require_scalar(msg_hash, SCALAR_FIELD_MODULUS, "msg_hash")

    r_inv = field_inverse(Fs(sig.r))
    U = base_mul((-(r_inv * Fs(msg_hash))).n)
    args = (sig, r_inv.n, U, pub_key)

    candidates = list(_candidates())
    workers = get_worker_count(max_workers)
    match = None

    if workers == 1:
        for i, parity in candidates:
            match = _check_candidate(i, parity, *args)
            if match is not None:
                break
    else:
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [
                executor.submit(_check_candidate, i, parity, *args)
                for i, parity in candidates
            ]
            # consume in enumeration order so the first match is deterministic
            for i, future in enumerate(futures):
                match = future.result()
                if match is not None:
                    for pending in futures[i + 1:]:
                        pending.cancel()
                    break
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    if match is None:
        raise NoValidCandidateFoundError(len(candidates))

    R, T = match
    logger.debug("recovery: matched R with x=%d", R.x)
    return EfficientEcdsaInputs(
        R=weierstrass_to_edwards(R),
        T=weierstrass_to_edwards(T),
        U=weierstrass_to_edwards(U),
    )
