import pytest

from bjj_membership_poc.membership_protocol.config import (
    SCALAR_FIELD_MODULUS,
    TREE_DEPTH,
)
from bjj_membership_poc.membership_protocol.inputs import assemble_membership_inputs
from bjj_membership_poc.membership_protocol.types import (
    EfficientEcdsaInputs,
    MembershipZKPInputs,
    MerkleProof,
)
from bjj_membership_poc.membership_protocol.weierstrass import base_mul


@pytest.fixture(scope="module")
def sig_inputs():
    R, T, U = (base_mul(k).to_edwards() for k in (7, 11, 13))
    return EfficientEcdsaInputs(R=R, T=T, U=U)


@pytest.fixture
def merkle_proof():
    return MerkleProof(
        root=123,
        path_indices=[1, 1, 0, 0, 1, 0, 0, 0],
        siblings=[10 * i for i in range(TREE_DEPTH)],
    )


def test_fields_are_copied(merkle_proof, sig_inputs):
    inputs = assemble_membership_inputs(merkle_proof, sig_inputs, 555, 77, 99)
    assert isinstance(inputs, MembershipZKPInputs)
    assert inputs.s == 77
    assert inputs.root == 123
    assert (inputs.Tx, inputs.Ty) == (sig_inputs.T.x, sig_inputs.T.y)
    assert (inputs.Ux, inputs.Uy) == (sig_inputs.U.x, sig_inputs.U.y)
    assert inputs.path_indices == merkle_proof.path_indices
    assert inputs.siblings == merkle_proof.siblings
    assert inputs.nullifier_randomness == 99


def test_msg_hash_does_not_reach_circuit(merkle_proof, sig_inputs):
    first = assemble_membership_inputs(merkle_proof, sig_inputs, 1, 77, 99)
    second = assemble_membership_inputs(merkle_proof, sig_inputs, 2, 77, 99)
    assert first == second


def test_r_does_not_reach_circuit(merkle_proof, sig_inputs):
    data = assemble_membership_inputs(merkle_proof, sig_inputs, 1, 77, 99).to_circuit_dict()
    assert str(sig_inputs.R.x) not in data.values()


def test_rejects_wrong_proof_type(sig_inputs):
    with pytest.raises(TypeError, match="merkle_proof must be MerkleProof"):
        assemble_membership_inputs({"root": "1"}, sig_inputs, 1, 1, 1)


def test_rejects_wrong_sig_inputs_type(merkle_proof):
    with pytest.raises(TypeError, match="sig_inputs must be EfficientEcdsaInputs"):
        assemble_membership_inputs(merkle_proof, None, 1, 1, 1)


def test_rejects_non_int_msg_hash(merkle_proof, sig_inputs):
    with pytest.raises(TypeError, match="msg_hash must be int"):
        assemble_membership_inputs(merkle_proof, sig_inputs, "1", 1, 1)


def test_rejects_out_of_range_msg_hash(merkle_proof, sig_inputs):
    with pytest.raises(ValueError, match="msg_hash out of range"):
        assemble_membership_inputs(
            merkle_proof, sig_inputs, SCALAR_FIELD_MODULUS, 1, 1
        )


def test_rejects_out_of_range_s(merkle_proof, sig_inputs):
    with pytest.raises(ValueError, match="s out of range"):
        assemble_membership_inputs(merkle_proof, sig_inputs, 1, -1, 1)
