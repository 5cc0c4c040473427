"""
⚠️ DRAFT — requires crypto review before production use

Curve and protocol configuration for BabyJubJub ECDSA membership inputs.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

BabyJubJub is the twisted Edwards curve defined over the BN254 scalar field,
so its points can be handled natively inside Groth16/PLONK circuits over BN254.
"""

from py_ecc.bn128 import curve_order as BN254_SCALAR_FIELD

# ============================================================================
# CURVE SELECTION
# ============================================================================

CURVE_NAME = "babyjubjub"

# ============================================================================
# FIELD PARAMETERS
# ============================================================================

# Base field Fb: coordinates of curve points (BN254 scalar field)
BASE_FIELD_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

# Scalar field Fs: order of the prime subgroup generated by BASE8
SCALAR_FIELD_MODULUS = (
    2736030358979909402780800718157159386076813972158567259200215660948447373041
)
SCALAR_FIELD_BITS = 251

# Full group order is COFACTOR * SCALAR_FIELD_MODULUS
COFACTOR = 8

# ============================================================================
# CURVE MODELS
# ============================================================================

# Twisted Edwards: a*x^2 + y^2 = 1 + d*x^2*y^2
EDWARDS_A = 168700
EDWARDS_D = 168696

# Montgomery: B*v^2 = u^3 + A*u^2 + u
MONTGOMERY_A = 168698
MONTGOMERY_B = 1

# The short Weierstrass coefficients are derived from the Montgomery
# constants in curve.py.

# ============================================================================
# GENERATOR
# ============================================================================

# BASE8 = 8 * (full group generator); generates the order-n subgroup.
GENERATOR_EDWARDS = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)

# ============================================================================
# MERKLE ACCUMULATOR
# ============================================================================

# Fixed by the membership circuit; proofs always carry TREE_DEPTH entries.
TREE_DEPTH = 8
MAX_LEAVES = 2 ** TREE_DEPTH

# Zero-subtree hashes produced by circomlib's Poseidon(2). Used to check that
# a plugged-in "poseidon" oracle matches the circuit.
REFERENCE_ZERO_HASHES = {
    "poseidon": (
        0,
        14744269619966411208579211824598458697587494354926760081771325075741142829156,
        7423237065226347324353380772367382631490014989348495481811164164159255474657,
        11286972368698509976183087595462810875513684078608517520839298933882497716792,
        3607627140608796879659380071776844901612302623152076817094415224584923813162,
        19712377064642672829441595136074946683621277828620209496774504837737984048981,
        20775607673010627194014556968476266066927294572720319469184847051418138353016,
        3396914609616007258851405644437304192397291162432396347162513310381425243293,
    ),
}

# ============================================================================
# HASH FUNCTIONS
# ============================================================================

DEFAULT_HASH_ORACLE = "sha256"
FIELD_ELEMENT_BYTES = 32

DOMAIN_SEPARATOR_PREFIX = b"BJJ_MEMBERSHIP_V1_"

DOMAIN_SEPARATORS = {
    "merkle_node": DOMAIN_SEPARATOR_PREFIX + b"MERKLE_NODE",
}

# ============================================================================
# PROOF SERIALIZATION
# ============================================================================

PROOF_VERSION = 1

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert CURVE_NAME == "babyjubjub", "Invalid curve"
    assert BASE_FIELD_MODULUS == BN254_SCALAR_FIELD, (
        "BabyJubJub base field must be the BN254 scalar field"
    )
    assert SCALAR_FIELD_MODULUS.bit_length() == SCALAR_FIELD_BITS
    assert COFACTOR * SCALAR_FIELD_MODULUS > BASE_FIELD_MODULUS, (
        "Cofactor enumeration must cover every x-coordinate"
    )
    assert 1 < COFACTOR <= 8, "Cofactor enumeration assumes a small cofactor"

    # Montgomery form of a*x^2 + y^2 = 1 + d*x^2*y^2:
    # A = 2(a + d) / (a - d), B = 4 / (a - d)
    assert EDWARDS_A - EDWARDS_D == 4, "Edwards constants changed"
    assert MONTGOMERY_A * (EDWARDS_A - EDWARDS_D) == 2 * (EDWARDS_A + EDWARDS_D)
    assert MONTGOMERY_B * (EDWARDS_A - EDWARDS_D) == 4

    assert TREE_DEPTH == 8, "Circuit expects depth-8 Merkle proofs"
    for name, zeros in REFERENCE_ZERO_HASHES.items():
        assert len(zeros) == TREE_DEPTH, f"Zero table for {name} has wrong depth"
        assert zeros[0] == 0, f"Zero table for {name} must start at 0"

    return True


# Auto-validate on import
validate_config()
