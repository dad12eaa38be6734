"""Vector math, floating point and shading-geometry helpers."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, TypeVar, Union

_ORIGIN = 1.0 / 32.0
_FLOAT_SCALE = 1.0 / 65536.0
_INT_SCALE = 256.0

Scalar = Union[int, float]


@dataclass(frozen=True, slots=True)
class Vec3:
    """An immutable three-component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, axis: int) -> float:
        return (self.x, self.y, self.z)[axis]

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def __mul__(self, other: Union["Vec3", Scalar]) -> "Vec3":
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vec3(self.x * other, self.y * other, self.z * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Union["Vec3", Scalar]) -> "Vec3":
        if isinstance(other, Vec3):
            return Vec3(self.x / other.x, self.y / other.y, self.z / other.z)
        return Vec3(self.x / other, self.y / other, self.z / other)

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> float:
        return math.sqrt(self.dot(self))


def _div(a: float, b: float) -> float:
    """Division with IEEE semantics for a zero divisor."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _f32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


def cdot(a: Vec3, b: Vec3) -> float:
    """Dot product clamped to zero."""
    x = a.dot(b)
    return 0.0 if x < 0.0 else x


def absdot(a: Vec3, b: Vec3) -> float:
    """Absolute value of the dot product."""
    x = a.dot(b)
    return -x if x < 0.0 else x


def int_as_float(i: int) -> float:
    """Reinterpret the low 32 bits of an integer as a single precision float."""
    return struct.unpack("<f", struct.pack("<I", i & 0xFFFFFFFF))[0]


def float_as_int(f: float) -> int:
    """Reinterpret a single precision float as a signed 32 bit integer."""
    return struct.unpack("<i", struct.pack("<f", f))[0]


def _nextafter32(x: float, toward: float) -> float:
    x = _f32(x)
    toward = _f32(toward)
    if math.isnan(x) or math.isnan(toward):
        return math.nan
    if x == toward:
        return toward
    if x == 0.0:
        return int_as_float(1) if toward > 0.0 else int_as_float(-2147483647)
    bits = float_as_int(x)
    bits += 1 if (toward > x) == (x > 0.0) else -1
    return int_as_float(bits)


def nextafter_toward(v: Vec3, d: Vec3) -> Vec3:
    """Move each single precision component of v one step in the direction of d."""
    return Vec3(
        *(
            _nextafter32(c, c + 1.0 if dc > 0 else c - 1.0)
            for c, dc in zip(v, d)
        )
    )


def offset_ray_origin(p: Vec3, ng: Vec3) -> Vec3:
    """Push a surface point off the surface along the geometric normal."""

    def shift(pc: float, nc: float) -> float:
        if abs(pc) < _ORIGIN:
            return pc + _FLOAT_SCALE * nc
        of = int(_INT_SCALE * nc)
        return int_as_float(float_as_int(pc) + (-of if pc < 0 else of))

    return Vec3(*(shift(pc, nc) for pc, nc in zip(p, ng)))


def clamp(f: float, lo: float, hi: float) -> float:
    return lo if f < lo else (hi if f > hi else f)


def fresnel_dielectric(cos_wi: float, ior_medium: float, ior_material: float) -> float:
    """Unpolarised Fresnel reflectance of a dielectric interface."""
    if cos_wi < 0.0:
        ei, et = ior_material, ior_medium
    else:
        ei, et = ior_medium, ior_material
    cos_wi = clamp(abs(cos_wi), 0.0, 1.0)
    sin_t = (ei / et) * math.sqrt(1.0 - cos_wi * cos_wi)
    if sin_t >= 1.0:
        return 1.0
    cos_t = math.sqrt(max(1.0 - sin_t * sin_t, 0.0))
    r_parl = (et * cos_wi - ei * cos_t) / (et * cos_wi + ei * cos_t)
    r_perp = (ei * cos_wi - et * cos_t) / (ei * cos_wi + et * cos_t)
    return (r_parl * r_parl + r_perp * r_perp) / 2.0


def refract(w_i: Vec3, n: Vec3, eta: float) -> Optional[Vec3]:
    """Refracted direction, or None on total internal reflection."""
    cos_i = w_i.dot(n)
    if cos_i < 0:
        eta = 1.0 / eta
        cos_i = -cos_i
        n = -n
    sin2_i = max(0.0, 1.0 - cos_i * cos_i)
    sin2_t = sin2_i / (eta * eta)
    if sin2_t >= 1.0:
        return None
    cos_t = math.sqrt(1.0 - sin2_t)
    return -w_i / eta + (cos_i / eta - cos_t) * n


def cos2_theta(cos_t: float) -> float:
    return cos_t * cos_t


def abs_cos_theta(cos_t: float) -> float:
    return -cos_t if cos_t < 0.0 else cos_t


def sin2_theta(cos_t: float) -> float:
    res = 1.0 - cos_t * cos_t
    return 0.0 if res < 0.0 else res


def sin_theta(cos_t: float) -> float:
    return math.sqrt(sin2_theta(cos_t))


def tan_theta(cos_t: float) -> float:
    return _div(sin_theta(cos_t), cos_t)


def tan2_theta(cos_t: float) -> float:
    return _div(sin2_theta(cos_t), cos2_theta(cos_t))


def theta_z(z: float) -> float:
    """Polar angle for a given hemispherical elevation."""
    if z > 1.0:
        return 0.0
    if z < -1.0:
        return math.nan
    return math.acos(z)


def same_hemisphere(n: Vec3, v: Vec3) -> bool:
    return n.dot(v) > 0


def to_spherical(w: Vec3) -> Tuple[float, float]:
    """(theta, phi) of a direction, with y as the polar axis."""
    theta = theta_z(w.y)
    phi = math.atan2(w.z, w.x)
    return clamp(theta, 0.0, math.pi), (phi + 2.0 * math.pi if phi < 0.0 else phi)


def to_cartesian(w: Tuple[float, float]) -> Vec3:
    """Direction for (theta, phi), with z as the polar axis."""
    theta, phi = w
    sin_t = math.sin(theta)
    return Vec3(sin_t * math.cos(phi), sin_t * math.sin(phi), math.cos(theta))


def align(v: Vec3, axis: Vec3) -> Vec3:
    """Rotate a tangent-space vector so that +z maps onto axis."""
    s = math.copysign(1.0, axis.z)
    w = Vec3(v.x, v.y, v.z * s)
    h = Vec3(axis.x, axis.y, axis.z + s)
    k = w.dot(h) / (1.0 + abs(axis.z))
    return k * h - w


def flip_normal_to_ray(normal: Vec3, ray_dir: Vec3) -> Vec3:
    """Return the normal turned to face against the ray direction."""
    return -normal if same_hemisphere(ray_dir, normal) else normal


T = TypeVar("T", Vec3, float)


def bary_interpol(a: T, b: T, c: T, beta: float, gamma: float) -> T:
    return (1.0 - beta - gamma) * a + beta * b + gamma * c