import pytest

from bjj_membership_poc.membership_protocol.config import (
    BASE_FIELD_MODULUS,
    SCALAR_FIELD_MODULUS,
)
from bjj_membership_poc.membership_protocol.fields import (
    Fb,
    Fs,
    field_inverse,
    field_sqrt,
    is_square,
    parse_int,
)


def _non_residue() -> int:
    value = 2
    while pow(value, (BASE_FIELD_MODULUS - 1) // 2, BASE_FIELD_MODULUS) != (
        BASE_FIELD_MODULUS - 1
    ):
        value += 1
    return value


def test_field_moduli():
    assert Fb.field_modulus == BASE_FIELD_MODULUS
    assert Fs.field_modulus == SCALAR_FIELD_MODULUS


def test_field_inverse():
    value = Fb(123456789)
    assert (value * field_inverse(value)) == Fb.one()
    scalar = Fs(987654321)
    assert (scalar * field_inverse(scalar)) == Fs.one()


def test_field_inverse_of_zero_raises():
    with pytest.raises(ZeroDivisionError):
        field_inverse(Fb(0))
    with pytest.raises(ZeroDivisionError):
        field_inverse(Fs(SCALAR_FIELD_MODULUS))


@pytest.mark.parametrize("value", [0, 1, 4, 9, 12345, BASE_FIELD_MODULUS - 1])
def test_field_sqrt_of_squares(value):
    square = Fb(value) * Fb(value)
    root = field_sqrt(square)
    assert root is not None
    assert root * root == square
    assert root.n in (value, (-Fb(value)).n)


def test_field_sqrt_of_non_residue_is_none():
    value = Fb(_non_residue())
    assert is_square(value) is False
    assert field_sqrt(value) is None


def test_is_square_zero():
    assert is_square(Fb(0)) is True


class TestParseInt:
    """Test integer parsing for wire records."""

    def test_int_passthrough(self):
        assert parse_int(42, "x") == 42

    def test_decimal_string(self):
        assert parse_int(" 1234 ", "x") == 1234

    def test_hex_string(self):
        assert parse_int("0xff", "x") == 255
        assert parse_int("0XFF", "x") == 255

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            parse_int(True, "x")

    def test_float_rejected(self):
        with pytest.raises(TypeError, match="x must be int or str"):
            parse_int(1.5, "x")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError, match="x is not a valid integer"):
            parse_int("twelve", "x")
