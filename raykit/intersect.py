"""Rays, triangles, bounding boxes and their intersection tests."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .util import Vec3, offset_ray_origin

FLT_MAX = 3.4028234663852886e38

_EMPTY_MIN = Vec3(FLT_MAX, FLT_MAX, FLT_MAX)
_EMPTY_MAX = Vec3(-FLT_MAX, -FLT_MAX, -FLT_MAX)


def _div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


@dataclass(frozen=True, slots=True)
class Ray:
    o: Vec3
    d: Vec3
    t_min: float = 0.0
    t_max: float = FLT_MAX

    def inv_d(self) -> Vec3:
        """Componentwise reciprocal of the direction."""
        return Vec3(*(_div(1.0, c) for c in self.d))


@dataclass(frozen=True, slots=True)
class Triangle:
    a: int
    b: int
    c: int


@dataclass(slots=True)
class Mesh:
    """Vertex positions and the triangles indexing them."""

    vertices: List[Vec3] = field(default_factory=list)
    triangles: List[Triangle] = field(default_factory=list)

    def positions(self, tri: Triangle) -> Tuple[Vec3, Vec3, Vec3]:
        return self.vertices[tri.a], self.vertices[tri.b], self.vertices[tri.c]

    def replace_triangles(self, triangles: Iterable[Triangle]) -> None:
        self.triangles = list(triangles)


@dataclass(slots=True)
class TriangleIntersection:
    t: float = FLT_MAX
    beta: float = 0.0
    gamma: float = 0.0
    ref: int = -1

    def valid(self) -> bool:
        return self.t != FLT_MAX

    def reset(self) -> None:
        self.t = FLT_MAX
        self.beta = 0.0
        self.gamma = 0.0
        self.ref = -1


@dataclass(slots=True)
class AABB:
    min: Vec3 = _EMPTY_MIN
    max: Vec3 = _EMPTY_MAX

    def grow(self, other: Union[Vec3, "AABB"]) -> None:
        """Enlarge the box to contain a point or another box."""
        if isinstance(other, AABB):
            lo, hi = other.min, other.max
        else:
            lo = hi = other
        self.min = Vec3(*(min(a, b) for a, b in zip(lo, self.min)))
        self.max = Vec3(*(max(a, b) for a, b in zip(hi, self.max)))

    def surface_area(self) -> float:
        e = self.max - self.min
        return 2.0 * (e.x * e.y + e.x * e.z + e.y * e.z)

    def center(self) -> Vec3:
        return (self.min + self.max) * 0.5


def intersect_triangle(
    tri: Triangle, vertices: Sequence[Vec3], ray: Ray
) -> Optional[TriangleIntersection]:
    """Ray/triangle test; the hit's ref is left for the caller to set."""
    pa, pb, pc = vertices[tri.a], vertices[tri.b], vertices[tri.c]
    a, b, c = pa.x - pb.x, pa.y - pb.y, pa.z - pb.z
    d, e, f = pa.x - pc.x, pa.y - pc.y, pa.z - pc.z
    g, h, i = ray.d.x, ray.d.y, ray.d.z
    j, k, l = pa.x - ray.o.x, pa.y - ray.o.y, pa.z - ray.o.z

    c1 = e * i - h * f
    c2 = g * f - d * i
    c3 = d * h - e * g
    m = a * c1 + b * c2 + c * c3
    beta = j * c1 + k * c2 + l * c3

    c1 = a * k - j * b
    c2 = j * c - a * l
    c3 = b * l - k * c
    gamma = i * c1 + h * c2 + g * c3
    tt = -(f * c1 + e * c2 + d * c3)

    if m == 0.0:
        return None
    beta /= m
    gamma /= m
    tt /= m

    if ray.t_min < tt < ray.t_max and beta > 0 and gamma > 0 and beta + gamma <= 1:
        return TriangleIntersection(t=tt, beta=beta, gamma=gamma)
    return None


def intersect_box(box: AABB, ray: Ray) -> Optional[float]:
    """Slab test handling axis-parallel rays; returns the entry distance."""
    t_near, t_far = -FLT_MAX, FLT_MAX
    for lo, hi, o, d in zip(box.min, box.max, ray.o, ray.d):
        if d == 0:
            if o < lo or o > hi:
                return None
            continue
        t1 = (lo - o) / d
        t2 = (hi - o) / d
        if t1 > t2:
            t1, t2 = t2, t1
        if t1 > t_near:
            t_near = t1
        if t2 < t_far:
            t_far = t2
        if t_near > t_far:
            return None
        if t_far < ray.t_min or t_near > ray.t_max:
            return None
    return t_near


def _slab_hit(ray: Ray, spans: Iterable[Tuple[float, float]]) -> Optional[float]:
    lows = []
    highs = []
    for a, b in spans:
        lows.append(a if a < b else b)
        highs.append(a if b < a else b)
    lx, ly, lz = lows
    hx, hy, hz = highs
    t1 = ly if lx < ly else lx
    t1 = t1 if lz < t1 else lz
    t2 = hx if hx < hy else hy
    t2 = hz if hz < t2 else t2
    if t1 > t2 or t2 < ray.t_min or t1 > ray.t_max:
        return None
    return t1


def intersect_box_slabs(box: AABB, ray: Ray) -> Optional[float]:
    """Branchless slab test dividing by the direction."""
    return _slab_hit(
        ray,
        (
            (_div(lo - o, d), _div(hi - o, d))
            for lo, hi, o, d in zip(box.min, box.max, ray.o, ray.d)
        ),
    )


def intersect_box_reciprocal(box: AABB, ray: Ray) -> Optional[float]:
    """Slab test multiplying by the reciprocal direction computed here."""
    inv = (_div(1.0, d) for d in ray.d)
    return _slab_hit(
        ray,
        (
            ((lo - o) * r, (hi - o) * r)
            for lo, hi, o, r in zip(box.min, box.max, ray.o, inv)
        ),
    )


def intersect_box_precomputed(box: AABB, ray: Ray) -> Optional[float]:
    """Slab test using the ray's reciprocal direction."""
    return _slab_hit(
        ray,
        (
            ((lo - o) * r, (hi - o) * r)
            for lo, hi, o, r in zip(box.min, box.max, ray.o, ray.inv_d())
        ),
    )


def offset_ray(r: Ray, ng: Vec3) -> Ray:
    """A copy of the ray starting just off the surface, with t_min reset."""
    return replace(r, t_min=0.0, o=offset_ray_origin(r.o, ng))