"""
Basic Membership Example

This example demonstrates how to prepare membership circuit inputs for a
BabyJubJub ECDSA signature.

Creates a small key set, signs a message with one of the keys, and builds the
Merkle proof, the Efficient ECDSA inputs and the circuit input record.
"""

import json

from bjj_membership_poc.membership_protocol import (
    derive_inputs,
    generate_merkle_proof,
    get_cached_hash_oracle,
    private_key_to_public_key,
    sign,
    verify_merkle_proof,
)
from bjj_membership_poc.membership_protocol.ecdsa import generate_private_key
from bjj_membership_poc.membership_protocol.inputs import assemble_membership_inputs
from bjj_membership_poc.membership_protocol.security import (
    RandomnessSource,
    hash_to_scalar,
)

KEY_SET_SIZE = 5
SIGNER_INDEX = 3


def main():
    """Run the basic membership example."""

    print("\n" + "=" * 70)
    print("BabyJubJub ECDSA Membership - Basic Example")
    print("=" * 70)

    # Create the key set
    print(f"\n1. Generating {KEY_SET_SIZE} key pairs...")
    private_keys = [generate_private_key() for _ in range(KEY_SET_SIZE)]
    public_keys = [private_key_to_public_key(sk) for sk in private_keys]
    edwards_keys = [pk.to_edwards() for pk in public_keys]
    print(f"   ✓ Signer is key #{SIGNER_INDEX}")

    # Sign a message
    print("\n2. Signing message...")
    msg_hash = hash_to_scalar(b"hello membership")
    sig = sign(msg_hash, private_keys[SIGNER_INDEX])
    print(f"   ✓ r = {sig.r}")

    # Merkle proof
    print("\n3. Building Merkle proof...")
    hasher = get_cached_hash_oracle()
    merkle_proof = generate_merkle_proof(edwards_keys, SIGNER_INDEX, hasher)
    assert verify_merkle_proof(edwards_keys[SIGNER_INDEX], merkle_proof, hasher)
    print(f"   ✓ root = {merkle_proof.root}")
    print(f"   ✓ path = {list(merkle_proof.path_indices)}")

    # Efficient ECDSA inputs
    print("\n4. Deriving R, T, U...")
    sig_inputs = derive_inputs(sig, msg_hash, public_keys[SIGNER_INDEX])
    print(f"   ✓ T = ({sig_inputs.T.x}, {sig_inputs.T.y})")

    # Circuit inputs
    print("\n5. Assembling circuit inputs...")
    nullifier_randomness = RandomnessSource().get_random_scalar_mod_order()
    inputs = assemble_membership_inputs(
        merkle_proof, sig_inputs, msg_hash, sig.s, nullifier_randomness
    )
    print(json.dumps(inputs.to_circuit_dict(), indent=2))

    print("\n" + "=" * 70)
    print("Done. Feed the record above to the circuit's witness generator.")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    main()
