"""
Prime fields used by BabyJubJub.

Fb is the coordinate field of the curve, Fs the field of scalars modulo the
prime subgroup order. Both reuse py_ecc's generic prime-field element.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from py_ecc.fields.field_elements import FQ

from .config import BASE_FIELD_MODULUS, SCALAR_FIELD_MODULUS


class Fb(FQ):
    field_modulus = BASE_FIELD_MODULUS


class Fs(FQ):
    field_modulus = SCALAR_FIELD_MODULUS


F = TypeVar("F", bound=FQ)


def field_inverse(value: F) -> F:
    """
    Multiplicative inverse.

    py_ecc maps the inverse of zero to zero; here it raises instead so that
    malformed scalars surface to the caller.

    Raises:
        ZeroDivisionError: If value is zero
    """
    if value.n == 0:
        raise ZeroDivisionError(f"inverse of zero in {type(value).__name__}")
    return type(value).one() / value


def parse_int(value, label: str) -> int:
    """Accept ints, decimal strings and 0x-prefixed hex strings."""
    if isinstance(value, bool):
        raise TypeError(f"{label} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text, 10)
        except ValueError as exc:
            raise ValueError(f"{label} is not a valid integer: {value!r}") from exc
    raise TypeError(f"{label} must be int or str, got {type(value).__name__}")


def is_square(value: FQ) -> bool:
    p = value.field_modulus
    if value.n == 0:
        return True
    return pow(value.n, (p - 1) // 2, p) == 1


def field_sqrt(value: F) -> Optional[F]:
    """
    Square root via Tonelli-Shanks.

    Returns:
        One square root of value, or None if value is not a quadratic residue.
        Callers pick the root they need by parity.
    """
    cls = type(value)
    p = value.field_modulus
    a = value.n
    if a == 0:
        return cls.zero()
    if not is_square(value):
        return None

    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1

    m = s
    c = pow(z, q, p)
    t = pow(a, q, p)
    r = pow(a, (q + 1) // 2, p)
    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = t2 * t2 % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m = i
        c = b * b % p
        t = t * c % p
        r = r * b % p

    return cls(r)
