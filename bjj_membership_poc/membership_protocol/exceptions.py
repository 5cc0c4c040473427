"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for the membership protocol.

These exceptions provide structured error handling for cryptographic operations.
"""


class MembershipProtocolError(Exception):
    """Base exception for membership protocol errors."""

    pass


class ProofGenerationError(MembershipProtocolError):
    """Error during proof generation."""

    pass


class ConfigurationError(MembershipProtocolError):
    """Configuration error."""

    pass


class SerializationError(MembershipProtocolError):
    """Malformed wire record."""

    pass


class CryptographicError(MembershipProtocolError):
    """Cryptographic operation error."""

    pass


class NotOnCurveError(CryptographicError, ValueError):
    """Coordinates do not describe a point on the expected curve model."""

    pass


class ConversionError(CryptographicError):
    """Birational map evaluated at one of its singular points."""

    def __init__(self, message: str, point=None):
        super().__init__(message)
        self.point = point


class IndexOutOfRangeError(MembershipProtocolError, IndexError):
    """Merkle proof requested for an index outside the key set."""

    def __init__(self, index, size: int):
        super().__init__(
            f"merkle: leaf index {index!r} out of range for {size} public keys"
        )
        self.index = index
        self.size = size


class NoValidCandidateFoundError(CryptographicError):
    """No recovered R satisfies s*T + U == pubKey."""

    def __init__(self, candidates_checked: int):
        super().__init__(
            "recovery: no R candidate satisfies the verification equation "
            f"({candidates_checked} candidates checked); signature, message "
            "hash and public key are inconsistent"
        )
        self.candidates_checked = candidates_checked
