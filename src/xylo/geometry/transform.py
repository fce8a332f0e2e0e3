"""
2x3 affine transforms.

    | sx  kx  tx |     x' = sx * x + kx * y + tx
    | ky  sy  ty |     y' = ky * x + sy * y + ty

`a @ b` is the matrix product: the transform that applies `b` first and
then `a`. Shape-space is y-up and angles are degrees, counter-clockwise.
"""

import math
from dataclasses import dataclass

import numpy as np

from ..shared.errors import TypeMismatch


def finite_float(value, what: str = "value") -> float:
    """float(value), rejecting values that overflow or are not finite."""
    try:
        number = float(value)
    except OverflowError:
        raise TypeMismatch(f"{what} overflows a float") from None
    if not math.isfinite(number):
        raise TypeMismatch(f"{what} is not finite ({number})")
    return number


@dataclass(frozen=True)
class Affine:
    sx: float = 1.0
    kx: float = 0.0
    ky: float = 0.0
    sy: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def __post_init__(self):
        if not all(math.isfinite(v) for v in (self.sx, self.kx, self.ky, self.sy, self.tx, self.ty)):
            raise TypeMismatch(f"transform overflows: {self}")

    @classmethod
    def identity(cls) -> "Affine":
        return IDENTITY

    @classmethod
    def translation(cls, x: float, y: float) -> "Affine":
        return cls(tx=finite_float(x, "translation"), ty=finite_float(y, "translation"))

    @classmethod
    def scaling(cls, x: float, y: float) -> "Affine":
        return cls(sx=finite_float(x, "scale factor"), sy=finite_float(y, "scale factor"))

    @classmethod
    def rotation(cls, degrees: float) -> "Affine":
        cos, sin = _cos_sin(finite_float(degrees, "rotation angle"))
        return cls(sx=cos, kx=-sin, ky=sin, sy=cos)

    @classmethod
    def skewing(cls, x_degrees: float, y_degrees: float) -> "Affine":
        x_radians = math.radians(finite_float(x_degrees, "skew angle"))
        y_radians = math.radians(finite_float(y_degrees, "skew angle"))
        return cls(kx=math.tan(x_radians), ky=math.tan(y_radians))

    @classmethod
    def reflection(cls, degrees: float) -> "Affine":
        """Mirror about the vertical axis turned `degrees` counter-clockwise."""
        return cls.rotation(degrees) @ cls.scaling(-1.0, 1.0) @ cls.rotation(-degrees)

    def __matmul__(self, other: "Affine") -> "Affine":
        if not isinstance(other, Affine):
            return NotImplemented
        return Affine(
            sx=self.sx * other.sx + self.kx * other.ky,
            kx=self.sx * other.kx + self.kx * other.sy,
            ky=self.ky * other.sx + self.sy * other.ky,
            sy=self.ky * other.kx + self.sy * other.sy,
            tx=self.sx * other.tx + self.kx * other.ty + self.tx,
            ty=self.ky * other.tx + self.sy * other.ty + self.ty,
        )

    def then(self, other: "Affine") -> "Affine":
        """Apply self first, then other."""
        return other @ self

    @property
    def determinant(self) -> float:
        return self.sx * self.sy - self.kx * self.ky

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY

    def apply_point(self, x: float, y: float):
        return (self.sx * x + self.kx * y + self.tx, self.ky * x + self.sy * y + self.ty)

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Map an (N, 2) array of points."""
        pts = np.asarray(points, dtype=np.float64)
        out = np.empty_like(pts)
        out[:, 0] = self.sx * pts[:, 0] + self.kx * pts[:, 1] + self.tx
        out[:, 1] = self.ky * pts[:, 0] + self.sy * pts[:, 1] + self.ty
        return out

    def scale_factor(self) -> float:
        """Largest stretch of a unit vector, used to size curve tessellation."""
        col_x = math.hypot(self.sx, self.ky)
        col_y = math.hypot(self.kx, self.sy)
        return max(col_x, col_y)


def _cos_sin(degrees: float):
    # exact values at quarter turns keep axis-aligned shapes pixel-aligned
    turn = math.fmod(float(degrees), 360.0)
    if turn < 0:
        turn += 360.0
    quarter = {0.0: (1.0, 0.0), 90.0: (0.0, 1.0), 180.0: (-1.0, 0.0), 270.0: (0.0, -1.0)}
    if turn in quarter:
        return quarter[turn]
    radians = math.radians(turn)
    return math.cos(radians), math.sin(radians)


IDENTITY = Affine()
