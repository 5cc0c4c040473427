"""
⚠️ DRAFT — requires crypto review before production use

Dual point model for BabyJubJub.

Circuits consume twisted Edwards coordinates while the group law used for
signature recovery runs on the birationally equivalent short Weierstrass
curve. Both models are linked through the Montgomery form:

    Edwards (x, y)  ->  Montgomery (u, v) = ((1 + y) / (1 - y), u / x)
    Montgomery      ->  Weierstrass (X, Y) = (u / B + A / 3B, v / B)

The map is undefined at the point at infinity, at Edwards points with x == 0
or y == 1, and at Weierstrass points with Y == 0 or u == -1. Converting any of
those raises ConversionError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .config import (
    BASE_FIELD_MODULUS,
    EDWARDS_A,
    EDWARDS_D,
    FIELD_ELEMENT_BYTES,
    MONTGOMERY_A,
    MONTGOMERY_B,
)
from .exceptions import ConversionError, NotOnCurveError
from .fields import Fb, parse_int
from .security import constant_time_compare

# ============================================================================
# CURVE CONSTANTS
# ============================================================================

_EDWARDS_A = Fb(EDWARDS_A)
_EDWARDS_D = Fb(EDWARDS_D)
_MONT_A = Fb(MONTGOMERY_A)
_MONT_B = Fb(MONTGOMERY_B)

# A / 3B, the shift between Montgomery u and Weierstrass X
_MONT_SHIFT = _MONT_A / (Fb(3) * _MONT_B)

# y^2 = x^3 + a*x + b
WEIERSTRASS_A = (Fb(3) - _MONT_A * _MONT_A) / (Fb(3) * _MONT_B * _MONT_B)
WEIERSTRASS_B = (Fb(2) * _MONT_A * _MONT_A * _MONT_A - Fb(9) * _MONT_A) / (
    Fb(27) * _MONT_B * _MONT_B * _MONT_B
)


def is_on_edwards_curve(x: Fb, y: Fb) -> bool:
    xx = x * x
    yy = y * y
    return _EDWARDS_A * xx + yy == Fb.one() + _EDWARDS_D * xx * yy


def is_on_weierstrass_curve(x: Fb, y: Fb) -> bool:
    return y * y == x * x * x + WEIERSTRASS_A * x + WEIERSTRASS_B


def _check_coordinates(x, y, model: str) -> None:
    for label, value in (("x", x), ("y", y)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(
                f"{model} {label} must be int, got {type(value).__name__}"
            )
        if not 0 <= value < BASE_FIELD_MODULUS:
            raise NotOnCurveError(
                f"{model} {label} coordinate outside the base field: {value}"
            )


# ============================================================================
# POINT TYPES
# ============================================================================


@dataclass(frozen=True)
class EdwardsPoint:
    """
    Affine point on the twisted Edwards curve a*x^2 + y^2 = 1 + d*x^2*y^2.

    Used for everything that reaches the circuit: Merkle leaves and the
    R, T, U public inputs.
    """

    x: int
    y: int

    def __post_init__(self):
        _check_coordinates(self.x, self.y, "Edwards")
        if not is_on_edwards_curve(Fb(self.x), Fb(self.y)):
            raise NotOnCurveError(
                f"({self.x}, {self.y}) is not on the Edwards curve"
            )

    def to_weierstrass(self) -> "WeierstrassPoint":
        return edwards_to_weierstrass(self)

    def to_bytes(self) -> bytes:
        return _encode(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": str(self.x), "y": str(self.y)}

    @classmethod
    def from_dict(cls, data: dict) -> "EdwardsPoint":
        return cls(parse_int(data["x"], "x"), parse_int(data["y"], "y"))


@dataclass(frozen=True)
class WeierstrassPoint:
    """
    Affine point on the short Weierstrass model y^2 = x^3 + a*x + b.

    Used wherever the group law is needed (see weierstrass.py).
    """

    x: int
    y: int

    def __post_init__(self):
        _check_coordinates(self.x, self.y, "Weierstrass")
        if not is_on_weierstrass_curve(Fb(self.x), Fb(self.y)):
            raise NotOnCurveError(
                f"({self.x}, {self.y}) is not on the Weierstrass curve"
            )

    @classmethod
    def from_affine(
        cls, pt: Optional[Tuple[Fb, Fb]]
    ) -> Optional["WeierstrassPoint"]:
        if pt is None:
            return None
        return cls(pt[0].n, pt[1].n)

    def to_edwards(self) -> EdwardsPoint:
        return weierstrass_to_edwards(self)

    def to_bytes(self) -> bytes:
        return _encode(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": str(self.x), "y": str(self.y)}

    @classmethod
    def from_dict(cls, data: dict) -> "WeierstrassPoint":
        return cls(parse_int(data["x"], "x"), parse_int(data["y"], "y"))


AnyPoint = Union[EdwardsPoint, WeierstrassPoint]


def _encode(x: int, y: int) -> bytes:
    return x.to_bytes(FIELD_ELEMENT_BYTES, "big") + y.to_bytes(
        FIELD_ELEMENT_BYTES, "big"
    )


# ============================================================================
# BIRATIONAL MAP
# ============================================================================


def edwards_to_weierstrass(point: Optional[EdwardsPoint]) -> WeierstrassPoint:
    """
    Map a twisted Edwards point to the short Weierstrass model.

    Raises:
        ConversionError: For the identity (0, 1), the 2-torsion point (0, -1)
            or a missing point
    """
    if point is None:
        raise ConversionError("conversion: no Edwards point given", point)

    x, y = Fb(point.x), Fb(point.y)
    if x == 0 or y == 1:
        raise ConversionError(
            f"conversion: Edwards point ({point.x}, {point.y}) is singular "
            "for the birational map",
            point,
        )

    u = (Fb.one() + y) / (Fb.one() - y)
    v = u / x
    return WeierstrassPoint.from_affine((u / _MONT_B + _MONT_SHIFT, v / _MONT_B))


def weierstrass_to_edwards(point: Optional[WeierstrassPoint]) -> EdwardsPoint:
    """
    Map a short Weierstrass point to the twisted Edwards model.

    Raises:
        ConversionError: For the point at infinity (None), points with Y == 0
            or points whose Montgomery u-coordinate is -1
    """
    if point is None:
        raise ConversionError("conversion: point at infinity has no affine image")

    u = (Fb(point.x) - _MONT_SHIFT) * _MONT_B
    v = Fb(point.y) * _MONT_B
    if v == 0 or u + Fb.one() == 0:
        raise ConversionError(
            f"conversion: Weierstrass point ({point.x}, {point.y}) is singular "
            "for the birational map",
            point,
        )

    x = u / v
    y = (u - Fb.one()) / (u + Fb.one())
    return EdwardsPoint(x.n, y.n)


def points_equal(a: Optional[AnyPoint], b: Optional[AnyPoint]) -> bool:
    """
    Compare two points by their canonical coordinates.

    Points in different models are compared in Weierstrass form. None stands
    for the point at infinity and only equals None.
    """
    if a is None or b is None:
        return a is None and b is None
    if type(a) is not type(b):
        if isinstance(a, EdwardsPoint):
            a = edwards_to_weierstrass(a)
        if isinstance(b, EdwardsPoint):
            b = edwards_to_weierstrass(b)
    return constant_time_compare(a.to_bytes(), b.to_bytes())
