"""
Group law on the short Weierstrass model of BabyJubJub.

Points are added and multiplied by ecpy's WeierstrassCurve built from the
derived coefficients below. The rest of the package speaks WeierstrassPoint
and uses None for the point at infinity; this module converts at the edges.
"""

from __future__ import annotations

from typing import Optional

from ecpy.curves import Point, WeierstrassCurve

from .config import (
    BASE_FIELD_MODULUS,
    COFACTOR,
    CURVE_NAME,
    GENERATOR_EDWARDS,
    SCALAR_FIELD_MODULUS,
)
from .curve import WEIERSTRASS_A, WEIERSTRASS_B, EdwardsPoint, WeierstrassPoint
from .fields import Fb, field_sqrt

# Every point's order divides the full group order
GROUP_ORDER = COFACTOR * SCALAR_FIELD_MODULUS

GENERATOR: WeierstrassPoint = EdwardsPoint(*GENERATOR_EDWARDS).to_weierstrass()

CURVE = WeierstrassCurve(
    {
        "name": f"{CURVE_NAME}-weierstrass",
        "type": "weierstrass",
        "size": BASE_FIELD_MODULUS.bit_length(),
        "a": WEIERSTRASS_A.n,
        "b": WEIERSTRASS_B.n,
        "field": BASE_FIELD_MODULUS,
        "generator": (GENERATOR.x, GENERATOR.y),
        "order": SCALAR_FIELD_MODULUS,
        "cofactor": COFACTOR,
    }
)


def _to_ecpy(point: WeierstrassPoint) -> Point:
    return Point(point.x, point.y, CURVE)


def _from_ecpy(point: Point) -> Optional[WeierstrassPoint]:
    if point.is_infinity:
        return None
    return WeierstrassPoint(point.x, point.y)


def point_neg(point: Optional[WeierstrassPoint]) -> Optional[WeierstrassPoint]:
    if point is None:
        return None
    return WeierstrassPoint(point.x, (-point.y) % BASE_FIELD_MODULUS)


def point_add(
    a: Optional[WeierstrassPoint], b: Optional[WeierstrassPoint]
) -> Optional[WeierstrassPoint]:
    if a is None:
        return b
    if b is None:
        return a
    if a.x == b.x and (a.y + b.y) % BASE_FIELD_MODULUS == 0:
        return None
    return _from_ecpy(CURVE.add_point(_to_ecpy(a), _to_ecpy(b)))


def scalar_mul(
    point: Optional[WeierstrassPoint], scalar: int
) -> Optional[WeierstrassPoint]:
    """
    Multiply a point by an integer scalar.

    Negative scalars multiply the negated point. The scalar is reduced modulo
    the full group order, so points outside the prime subgroup (candidate R
    values during recovery) are handled too.

    Returns:
        The product, or None for the point at infinity
    """
    if point is None:
        return None
    if scalar < 0:
        return scalar_mul(point_neg(point), -scalar)
    scalar %= GROUP_ORDER
    if scalar == 0:
        return None
    return _from_ecpy(CURVE.mul_point(scalar, _to_ecpy(point)))


def base_mul(scalar: int) -> Optional[WeierstrassPoint]:
    return scalar_mul(GENERATOR, scalar % SCALAR_FIELD_MODULUS)


def point_from_x(x: int, parity: int) -> Optional[WeierstrassPoint]:
    """
    Recover the point with the given x-coordinate and y parity.

    Args:
        x: Candidate x-coordinate, reduced modulo the base field
        parity: 0 for an even y, 1 for an odd y

    Returns:
        The point, or None when no curve point has that x-coordinate and
        parity
    """
    if parity not in (0, 1):
        raise ValueError(f"parity must be 0 or 1, got {parity!r}")

    fx = Fb(x)
    y = field_sqrt(fx * fx * fx + WEIERSTRASS_A * fx + WEIERSTRASS_B)
    if y is None:
        return None
    if y.n % 2 != parity:
        y = -y
        if y.n % 2 != parity:
            # y == 0: only the even parity exists
            return None
    return WeierstrassPoint(fx.n, y.n)
