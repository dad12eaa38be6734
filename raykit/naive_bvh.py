"""A simple bounding volume hierarchy with one triangle per leaf."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List

from .intersect import (
    AABB,
    Mesh,
    Ray,
    Triangle,
    TriangleIntersection,
    intersect_box,
    intersect_triangle,
)
from .seq import RayTracer
from .util import Vec3

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class NaiveBvhNode:
    """Inner nodes hold a box and two children; leaves hold a triangle index."""

    box: AABB = field(default_factory=AABB)
    left: int = 0
    right: int = 0
    triangle: int = -1

    def inner(self) -> bool:
        return self.triangle == -1


class NaiveBvh(RayTracer):
    """Object-median hierarchy that reorders the mesh's triangles in place."""

    def __init__(self) -> None:
        super().__init__()
        self.nodes: List[NaiveBvhNode] = []
        self.root = 0

    def build(self, mesh: Mesh) -> None:
        if not mesh.triangles:
            raise ValueError("cannot build a hierarchy over an empty mesh")
        super().build(mesh)
        _log.info("Building BVH...")
        started = time.perf_counter()
        self.nodes = []
        self.root = self._subdivide(mesh.triangles, mesh.vertices, 0, len(mesh.triangles))
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        _log.info("Done after %dms", elapsed_ms)

    def _subdivide(
        self, triangles: List[Triangle], vertices: List[Vec3], start: int, end: int
    ) -> int:
        if end - start == 1:
            node_id = len(self.nodes)
            self.nodes.append(NaiveBvhNode(triangle=start))
            return node_id

        def center(tri: Triangle) -> Vec3:
            return (vertices[tri.a] + vertices[tri.b] + vertices[tri.c]) * 0.333333

        box = AABB()
        for tri in triangles[start:end]:
            for idx in (tri.a, tri.b, tri.c):
                box.grow(vertices[idx])

        extent = box.max - box.min
        largest = max(extent.x, extent.y, extent.z)
        axis = 0 if largest == extent.x else (1 if largest == extent.y else 2)
        triangles[start:end] = sorted(triangles[start:end], key=lambda t: center(t)[axis])

        mid = start + (end - start) // 2
        node_id = len(self.nodes)
        self.nodes.append(NaiveBvhNode())
        left = self._subdivide(triangles, vertices, start, mid)
        right = self._subdivide(triangles, vertices, mid, end)
        node = self.nodes[node_id]
        node.left = left
        node.right = right
        node.box = box
        return node_id

    def closest_hit(self, ray: Ray) -> TriangleIntersection:
        mesh = self.mesh
        closest = TriangleIntersection()
        stack = [self.root]
        while stack:
            node = self.nodes[stack.pop()]
            if node.inner():
                dist = intersect_box(node.box, ray)
                if dist is not None and dist < closest.t:
                    stack.append(node.left)
                    stack.append(node.right)
            else:
                hit = intersect_triangle(mesh.triangles[node.triangle], mesh.vertices, ray)
                if hit is not None and hit.t < closest.t:
                    hit.ref = node.triangle
                    closest = hit
        return closest

    def any_hit(self, ray: Ray) -> bool:
        return self.closest_hit(ray).valid()