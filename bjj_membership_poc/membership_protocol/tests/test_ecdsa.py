"""
⚠️ DRAFT — requires crypto review before production use

Unit tests for signing and Efficient ECDSA input derivation.
"""

import pytest

from bjj_membership_poc.membership_protocol import ecdsa
from bjj_membership_poc.membership_protocol.config import (
    BASE_FIELD_MODULUS,
    COFACTOR,
    SCALAR_FIELD_MODULUS,
)
from bjj_membership_poc.membership_protocol.curve import (
    EdwardsPoint,
    edwards_to_weierstrass,
    points_equal,
)
from bjj_membership_poc.membership_protocol.exceptions import (
    CryptographicError,
    NoValidCandidateFoundError,
)
from bjj_membership_poc.membership_protocol.fields import Fs, field_inverse
from bjj_membership_poc.membership_protocol.types import (
    EfficientEcdsaInputs,
    Signature,
)
from bjj_membership_poc.membership_protocol.weierstrass import (
    GENERATOR,
    base_mul,
    point_add,
    scalar_mul,
)

PRIVATE_KEY = 0x2A5F0C81D3B7E49A6C1F0E2D3B4A59687766554433221100FFEEDDCCBBAA99
NONCE = 0x1F2E3D4C5B6A79881726354453627180918273645546372819A0B1C2D3E4F5
MSG_HASH = 0x0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF0123456789ABCD


@pytest.fixture(scope="module")
def signed():
    sig = ecdsa.sign(MSG_HASH, PRIVATE_KEY, nonce=NONCE)
    pub_key = ecdsa.private_key_to_public_key(PRIVATE_KEY)
    return sig, pub_key


class TestKeys:
    """Test key generation."""

    def test_generate_private_key_in_range(self):
        sk = ecdsa.generate_private_key()
        assert 0 < sk < SCALAR_FIELD_MODULUS

    def test_public_key_is_scalar_multiple(self):
        assert ecdsa.private_key_to_public_key(1) == GENERATOR
        assert ecdsa.private_key_to_public_key(3) == scalar_mul(GENERATOR, 3)

    @pytest.mark.parametrize("sk", [0, SCALAR_FIELD_MODULUS, -1])
    def test_out_of_range_key(self, sk):
        with pytest.raises(ValueError, match="private_key must be in"):
            ecdsa.private_key_to_public_key(sk)

    def test_non_int_key(self):
        with pytest.raises(TypeError):
            ecdsa.private_key_to_public_key("1")


class TestSign:
    """Test ECDSA signing."""

    def test_signature_equation(self, signed):
        """Test r = (kG).x mod n and s = k^-1 (m + r sk)."""
        sig, _ = signed
        R = base_mul(NONCE)
        assert sig.r == R.x % SCALAR_FIELD_MODULUS
        expected_s = field_inverse(Fs(NONCE)) * (Fs(MSG_HASH) + Fs(sig.r) * Fs(PRIVATE_KEY))
        assert sig.s == expected_s.n

    def test_fixed_nonce_is_deterministic(self, signed):
        sig, _ = signed
        assert ecdsa.sign(MSG_HASH, PRIVATE_KEY, nonce=NONCE) == sig

    def test_random_nonce_differs(self):
        first = ecdsa.sign(MSG_HASH, PRIVATE_KEY)
        second = ecdsa.sign(MSG_HASH, PRIVATE_KEY)
        assert first != second

    def test_invalid_nonce(self):
        with pytest.raises(ValueError, match="nonce must be in"):
            ecdsa.sign(MSG_HASH, PRIVATE_KEY, nonce=0)

    @pytest.mark.parametrize("msg_hash", [-1, SCALAR_FIELD_MODULUS, SCALAR_FIELD_MODULUS + 3])
    def test_msg_hash_out_of_range(self, msg_hash):
        with pytest.raises(ValueError, match="msg_hash out of range"):
            ecdsa.sign(msg_hash, PRIVATE_KEY, nonce=NONCE)

    def test_degenerate_supplied_nonce(self):
        """Test s == 0 with a supplied nonce is reported, not retried."""
        r = base_mul(NONCE).x % SCALAR_FIELD_MODULUS
        msg_hash = (-(Fs(r) * Fs(PRIVATE_KEY))).n
        with pytest.raises(CryptographicError, match="supplied nonce"):
            ecdsa.sign(msg_hash, PRIVATE_KEY, nonce=NONCE)


class TestCandidates:
    """Test the R candidate enumeration order."""

    def test_order(self):
        candidates = list(ecdsa._candidates())
        assert len(candidates) == 2 * COFACTOR
        assert candidates[:4] == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert candidates[-1] == (COFACTOR - 1, 1)


class TestDeriveInputs:
    """Test R recovery and T, U computation."""

    def test_returns_edwards_points(self, signed):
        sig, pub_key = signed
        inputs = ecdsa.derive_inputs(sig, MSG_HASH, pub_key)
        assert isinstance(inputs, EfficientEcdsaInputs)
        for point in (inputs.R, inputs.T, inputs.U):
            assert isinstance(point, EdwardsPoint)

    def test_recovers_nonce_point(self, signed):
        sig, pub_key = signed
        inputs = ecdsa.derive_inputs(sig, MSG_HASH, pub_key)
        assert inputs.R == base_mul(NONCE).to_edwards()

    def test_verification_equation(self, signed):
        """Test s*T + U == Q in Weierstrass form."""
        sig, pub_key = signed
        inputs = ecdsa.derive_inputs(sig, MSG_HASH, pub_key)
        T = edwards_to_weierstrass(inputs.T)
        U = edwards_to_weierstrass(inputs.U)
        assert points_equal(point_add(scalar_mul(T, sig.s), U), pub_key)

    def test_recovered_x_is_a_candidate(self, signed):
        sig, pub_key = signed
        inputs = ecdsa.derive_inputs(sig, MSG_HASH, pub_key)
        R = edwards_to_weierstrass(inputs.R)
        candidates = {
            (sig.r + i * SCALAR_FIELD_MODULUS) % BASE_FIELD_MODULUS
            for i in range(COFACTOR)
        }
        assert R.x in candidates
        assert R.x % SCALAR_FIELD_MODULUS == sig.r

    def test_t_and_u_definitions(self, signed):
        sig, pub_key = signed
        inputs = ecdsa.derive_inputs(sig, MSG_HASH, pub_key)
        r_inv = field_inverse(Fs(sig.r))
        R = edwards_to_weierstrass(inputs.R)
        assert edwards_to_weierstrass(inputs.T) == scalar_mul(R, r_inv.n)
        assert edwards_to_weierstrass(inputs.U) == base_mul((-(r_inv * Fs(MSG_HASH))).n)

    def test_parallel_matches_sequential(self, signed):
        sig, pub_key = signed
        sequential = ecdsa.derive_inputs(sig, MSG_HASH, pub_key, max_workers=1)
        parallel = ecdsa.derive_inputs(sig, MSG_HASH, pub_key, max_workers=4)
        assert sequential == parallel

    def test_several_keys(self):
        for sk, nonce, msg_hash in ((1, 2, 3), (5, 7, 11), (SCALAR_FIELD_MODULUS - 1, 13, 17)):
            sig = ecdsa.sign(msg_hash, sk, nonce=nonce)
            inputs = ecdsa.derive_inputs(sig, msg_hash, ecdsa.private_key_to_public_key(sk))
            assert inputs.R == base_mul(nonce).to_edwards()


class TestDeriveInputsFailures:
    """Test inconsistent signature tuples."""

    def test_wrong_public_key(self, signed):
        sig, _ = signed
        other = ecdsa.private_key_to_public_key(PRIVATE_KEY + 1)
        with pytest.raises(NoValidCandidateFoundError, match="recovery") as excinfo:
            ecdsa.derive_inputs(sig, MSG_HASH, other)
        assert excinfo.value.candidates_checked == 2 * COFACTOR

    def test_tweaked_s(self, signed):
        sig, pub_key = signed
        tweaked = Signature(sig.r, (sig.s + 1) % SCALAR_FIELD_MODULUS)
        with pytest.raises(NoValidCandidateFoundError):
            ecdsa.derive_inputs(tweaked, MSG_HASH, pub_key)

    def test_wrong_message(self, signed):
        sig, pub_key = signed
        with pytest.raises(NoValidCandidateFoundError):
            ecdsa.derive_inputs(sig, MSG_HASH + 1, pub_key, max_workers=4)

    def test_zero_r_propagates_division_error(self, signed):
        sig, pub_key = signed
        with pytest.raises(ZeroDivisionError):
            ecdsa.derive_inputs(Signature(0, sig.s), MSG_HASH, pub_key)

    def test_msg_hash_out_of_range(self, signed):
        """Test an unreduced hash is rejected before any candidate is tried."""
        sig, pub_key = signed
        with pytest.raises(ValueError, match="msg_hash out of range"):
            ecdsa.derive_inputs(sig, MSG_HASH + SCALAR_FIELD_MODULUS, pub_key)

    def test_type_checks(self, signed):
        sig, pub_key = signed
        with pytest.raises(TypeError, match="sig must be Signature"):
            ecdsa.derive_inputs((sig.r, sig.s), MSG_HASH, pub_key)
        with pytest.raises(TypeError, match="pub_key must be WeierstrassPoint"):
            ecdsa.derive_inputs(sig, MSG_HASH, pub_key.to_edwards())
