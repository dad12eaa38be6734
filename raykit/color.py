"""Colour helpers."""

from __future__ import annotations

import math

from .util import Vec3, clamp

_LUMA_WEIGHTS = Vec3(0.212671, 0.715160, 0.072169)


def luma(rgb: Vec3) -> float:
    """Perceptual brightness of a colour."""
    return _LUMA_WEIGHTS.dot(rgb)


def _fract(x: float) -> float:
    return x - math.floor(x)


def heatmap(val: float) -> Vec3:
    """Blue-to-red heat map colour for a value in [0, 1]."""
    hue = 251.1 / 360.0
    h = hue + clamp(val, 0.0, 1.0) * -hue
    s = 1.0
    v = 0.0 if val < 1e-4 else 1.0

    def channel(offset: float) -> float:
        p = abs(_fract(h + offset) * 6.0 - 3.0)
        c = clamp(p - 1.0, 0.0, 1.0)
        return v * (1.0 + (c - 1.0) * s)

    return Vec3(*(channel(k) for k in (1.0, 2.0 / 3.0, 1.0 / 3.0)))