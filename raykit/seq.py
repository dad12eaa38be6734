"""Ray tracers over a triangle mesh: the common interface and a brute-force tracer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .intersect import Mesh, Ray, TriangleIntersection, intersect_triangle


class RayTracer(ABC):
    """Answers closest-hit and any-hit queries against a mesh."""

    def __init__(self) -> None:
        self._mesh: Optional[Mesh] = None

    @property
    def mesh(self) -> Mesh:
        if self._mesh is None:
            raise RuntimeError("no mesh has been built")
        return self._mesh

    def build(self, mesh: Mesh) -> None:
        """Prepare the tracer for queries against mesh."""
        self._mesh = mesh

    @abstractmethod
    def closest_hit(self, ray: Ray) -> TriangleIntersection:
        """The nearest hit along the ray; invalid if nothing is hit."""

    @abstractmethod
    def any_hit(self, ray: Ray) -> bool:
        """Whether the ray hits anything within its interval."""


class SequentialTracer(RayTracer):
    """Tests every triangle of the mesh in turn."""

    def build(self, mesh: Mesh) -> None:
        super().build(mesh)

    def closest_hit(self, ray: Ray) -> TriangleIntersection:
        mesh = self.mesh
        closest = TriangleIntersection()
        for i, tri in enumerate(mesh.triangles):
            hit = intersect_triangle(tri, mesh.vertices, ray)
            if hit is not None and hit.t < closest.t:
                hit.ref = i
                closest = hit
        return closest

    def any_hit(self, ray: Ray) -> bool:
        mesh = self.mesh
        return any(
            intersect_triangle(tri, mesh.vertices, ray) is not None
            for tri in mesh.triangles
        )