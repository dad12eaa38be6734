"""Ray tracer over a binary bounding volume hierarchy."""

from __future__ import annotations

import enum
import itertools
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO, Union

from .bvh_build import (
    Bvh,
    BvhBuilder,
    ObjectMedianBuilder,
    SahBuilder,
    SpatialMedianBuilder,
    TriangleLayout,
)
from .intersect import (
    AABB,
    Mesh,
    Ray,
    TriangleIntersection,
    intersect_box_precomputed,
    intersect_triangle,
)
from .seq import RayTracer

_log = logging.getLogger(__name__)


class SplitType(enum.Enum):
    """Strategy used to split a node while building the hierarchy."""

    SM = "sm"
    OM = "om"
    SAH = "sah"


@dataclass(frozen=True, slots=True)
class NodeStats:
    """Triangle counts over the leaves of a hierarchy."""

    leaves: int
    min_triangles: int
    max_triangles: int
    average_triangles: int
    median_triangles: int

    def __str__(self) -> str:
        return "\n".join(
            (
                f"number of leaf nodes: {self.leaves}",
                f"minimum triangles per node: {self.min_triangles}",
                f"maximum triangles per node: {self.max_triangles}",
                f"average triangles per node: {self.average_triangles}",
                f"median of triangles per node: {self.median_triangles}",
            )
        )


def _parse_int(tokens: Sequence[str], message: str) -> int:
    if len(tokens) != 1:
        raise ValueError(message)
    try:
        return int(tokens[0])
    except ValueError:
        raise ValueError(message) from None


_FACES = (
    (0, 1, 2, 3),
    (1, 5, 6, 2),
    (0, 1, 5, 4),
    (3, 2, 6, 7),
    (4, 7, 6, 5),
    (4, 0, 3, 7),
)


def _write_box(out: TextIO, box: AABB, first_vertex: int, depth: int) -> None:
    lo, hi = box.min, box.max
    corners = (
        (lo.x, lo.y, lo.z),
        (hi.x, lo.y, lo.z),
        (hi.x, hi.y, lo.z),
        (lo.x, hi.y, lo.z),
        (lo.x, lo.y, hi.z),
        (hi.x, lo.y, hi.z),
        (hi.x, hi.y, hi.z),
        (lo.x, hi.y, hi.z),
    )
    for x, y, z in corners:
        out.write(f"v {x:g} {y:g} {z:g}\n")
    out.write(f"g level{depth + 1}\n")
    for face in _FACES:
        out.write("f " + " ".join(str(first_vertex + i) for i in face) + "\n")


class BinaryBvhTracer(RayTracer):
    """Traces rays through a binary hierarchy with near-child-first traversal."""

    def __init__(
        self,
        layout: TriangleLayout = TriangleLayout.INDEXED,
        esc: bool = False,
    ) -> None:
        super().__init__()
        self.layout = layout
        self.esc = esc
        self.split_type = SplitType.OM
        self.max_triangles_per_node = 1
        self.number_of_planes = 1
        self._bvh: Optional[Bvh] = None

    @property
    def bvh(self) -> Bvh:
        if self._bvh is None:
            raise RuntimeError("no hierarchy has been built")
        return self._bvh

    def _builder(self, mesh: Mesh) -> BvhBuilder:
        if self.split_type is SplitType.OM:
            return ObjectMedianBuilder(mesh, self.max_triangles_per_node, self.layout)
        if self.split_type is SplitType.SM:
            return SpatialMedianBuilder(mesh, self.max_triangles_per_node, self.layout)
        return SahBuilder(
            mesh, self.max_triangles_per_node, self.number_of_planes, self.layout
        )

    def build(self, mesh: Mesh) -> None:
        super().build(mesh)
        _log.info("Building BVH...")
        started = time.perf_counter()
        self._bvh = self._builder(mesh).build(self.esc)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        _log.info("Done after %dms", elapsed_ms)

    def _triangle_index(self, i: int) -> int:
        if self.layout is TriangleLayout.FLAT:
            return i
        return self.bvh.index[i]

    def _leaf_triangles(self, node) -> Iterator[int]:
        offset = node.tri_offset()
        for i in range(node.tri_count()):
            yield self._triangle_index(offset + i)

    @staticmethod
    def _push_children(
        stack: List[int], node, dist_l: Optional[float], dist_r: Optional[float]
    ) -> None:
        if dist_l is not None and dist_r is not None:
            if dist_l < dist_r:
                stack.extend((node.link_r, node.link_l))
            else:
                stack.extend((node.link_l, node.link_r))
        elif dist_l is not None:
            stack.append(node.link_l)
        elif dist_r is not None:
            stack.append(node.link_r)

    def closest_hit(self, ray: Ray) -> TriangleIntersection:
        mesh = self.mesh
        bvh = self.bvh
        closest = TriangleIntersection()
        stack = [bvh.root]
        while stack:
            node = bvh.nodes[stack.pop()]
            if node.inner():
                dist_l = intersect_box_precomputed(node.box_l, ray)
                if dist_l is not None and not dist_l < closest.t:
                    dist_l = None
                dist_r = intersect_box_precomputed(node.box_r, ray)
                if dist_r is not None and not dist_r < closest.t:
                    dist_r = None
                self._push_children(stack, node, dist_l, dist_r)
            else:
                for tri_idx in self._leaf_triangles(node):
                    hit = intersect_triangle(mesh.triangles[tri_idx], mesh.vertices, ray)
                    if hit is not None and hit.t < closest.t:
                        hit.ref = tri_idx
                        closest = hit
        return closest

    def any_hit(self, ray: Ray) -> bool:
        mesh = self.mesh
        bvh = self.bvh
        stack = [bvh.root]
        while stack:
            node = bvh.nodes[stack.pop()]
            if node.inner():
                self._push_children(
                    stack,
                    node,
                    intersect_box_precomputed(node.box_l, ray),
                    intersect_box_precomputed(node.box_r, ray),
                )
            else:
                for tri_idx in self._leaf_triangles(node):
                    if intersect_triangle(mesh.triangles[tri_idx], mesh.vertices, ray):
                        return True
        return False

    def interprete(self, command: str, args: Union[str, Sequence[str]]) -> bool:
        """Apply a configuration command; returns False if the command is not ours."""
        if command != "bvh":
            return False
        tokens = args.split() if isinstance(args, str) else list(args)
        if not tokens:
            raise ValueError("Unknown bvh subcommand ")
        value, rest = tokens[0], tokens[1:]
        if value == "om":
            self.split_type = SplitType.OM
        elif value == "sm":
            self.split_type = SplitType.SM
        elif value == "sah":
            planes = _parse_int(
                rest,
                'Syntax error, "bvh sah" requires exactly one positive integral value',
            )
            self.split_type = SplitType.SAH
            self.number_of_planes = planes
        elif value == "triangles":
            mode = rest[0] if rest else ""
            if mode == "multiple":
                self.max_triangles_per_node = _parse_int(
                    rest[1:],
                    'Syntax error, "triangles multiple" requires exactly one '
                    "positive integral value",
                )
            elif mode == "single":
                self.max_triangles_per_node = 1
            else:
                raise ValueError(
                    'Syntax error, "bvh triangles" requires a mode (single or multiple)'
                )
        elif value == "statistics":
            print(self.node_stats())
        elif value == "export":
            message = (
                'Syntax error, "export" requires exactly one positive integral value '
                "and a filename.obj"
            )
            if len(rest) != 2:
                raise ValueError(message)
            depth = _parse_int(rest[:1], message)
            self.export_bvh(rest[1], depth)
            print(f"bvh exported to {rest[1]}")
        else:
            raise ValueError(f"Unknown bvh subcommand {value}")
        return True

    def node_stats(self) -> NodeStats:
        """Statistics of the triangle counts held by the leaves."""
        counts = sorted(n.tri_count() for n in self.bvh.nodes if not n.inner())
        if not counts:
            raise RuntimeError("the hierarchy has no leaves")
        n = len(counts)
        if n % 2 == 1:
            median = counts[n // 2]
        else:
            median = int(0.5 * (counts[n // 2 - 1] + counts[n // 2]))
        return NodeStats(
            leaves=n,
            min_triangles=counts[0],
            max_triangles=counts[-1],
            average_triangles=sum(counts) // n,
            median_triangles=median,
        )

    def export_bvh(self, filename: Union[str, Path], max_depth: int) -> None:
        """Write the child boxes of inner nodes above max_depth as an OBJ file."""
        bvh = self.bvh
        counter = itertools.count()

        def export(node_id: int, depth: int, out: TextIO) -> None:
            node = bvh.nodes[node_id]
            if not node.inner() or depth >= max_depth:
                return
            for box in (node.box_l, node.box_r):
                _write_box(out, box, next(counter) * 8 + 1, depth)
            export(node.link_l, depth + 1, out)
            export(node.link_r, depth + 1, out)

        with open(filename, "w", encoding="utf-8") as out:
            export(bvh.root, 0, out)