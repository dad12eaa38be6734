"""Warping of uniform samples onto disks, hemispheres and triangles."""

from __future__ import annotations

import math
from typing import Tuple

from .util import Vec3

Sample2 = Tuple[float, float]


def uniform_sample_disk(sample: Sample2) -> Tuple[float, float]:
    """Uniformly distributed point on the unit disk."""
    u, v = sample
    r = math.sqrt(u)
    theta = 2.0 * math.pi * v
    return r * math.cos(theta), r * math.sin(theta)


def uniform_sample_hemisphere(sample: Sample2) -> Vec3:
    """Uniformly distributed tangent-space direction on the +z hemisphere."""
    z, v = sample
    r0 = 1.0 - z * z
    r = math.sqrt(-r0 if r0 < 0 else r0)
    phi = 2.0 * math.pi * v
    return Vec3(r * math.cos(phi), r * math.sin(phi), z)


def uniform_hemisphere_pdf() -> float:
    return 1.0 / (2.0 * math.pi)


def cosine_sample_hemisphere(sample: Sample2) -> Vec3:
    """Cosine distributed tangent-space direction on the +z hemisphere."""
    dx, dy = uniform_sample_disk(sample)
    z = 1.0 - dx * dx - dy * dy
    return Vec3(dx, dy, math.sqrt(z) if z > 0 else 0.0)


def cosine_hemisphere_pdf(cos_t: float) -> float:
    return cos_t / math.pi


def uniform_sample_triangle(sample: Sample2) -> Tuple[float, float]:
    """Uniform barycentric coordinates (beta, gamma) on a triangle."""
    u, v = sample
    su0 = math.sqrt(u)
    return 1.0 - su0, v * su0