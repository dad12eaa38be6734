"""Construction of binary bounding volume hierarchies over triangle meshes."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from .intersect import AABB, FLT_MAX, Mesh
from .util import Vec3

_K_T = 1.0
_K_I = 1.0


class TriangleLayout(enum.Enum):
    """How leaves refer to triangles once the hierarchy is built."""

    FLAT = "flat"
    INDEXED = "indexed"


@dataclass(slots=True)
class BvhNode:
    """A binary node; leaves store -offset in link_l and -count in link_r."""

    box_l: AABB = field(default_factory=AABB)
    box_r: AABB = field(default_factory=AABB)
    link_l: int = 0
    link_r: int = 0

    def inner(self) -> bool:
        return self.link_r >= 0

    def make_leaf(self, offset: int, count: int) -> None:
        self.link_l = -offset
        self.link_r = -count

    def tri_offset(self) -> int:
        return -self.link_l

    def tri_count(self) -> int:
        return -self.link_r


@dataclass(slots=True)
class Bvh:
    root: int = 0
    nodes: List[BvhNode] = field(default_factory=list)
    index: List[int] = field(default_factory=list)


@dataclass(slots=True)
class Prim(AABB):
    """A bounding box of (part of) a triangle."""

    tri_index: int = 0

    def center(self) -> Vec3:
        return (self.min + self.max) * 0.5


def _largest_axis(box: AABB) -> int:
    e = box.max - box.min
    largest = max(e.x, e.y, e.z)
    if largest == e.x:
        return 0
    if largest == e.y:
        return 1
    return 2


def _dedup_consecutive(poly: List[Vec3]) -> List[Vec3]:
    out: List[Vec3] = []
    for v in poly:
        if not out or out[-1] != v:
            out.append(v)
    return out


def split_polygon(poly: Sequence[Vec3], threshold: float) -> List[AABB]:
    """Recursively halve a convex polygon until each piece's box area is at most threshold."""
    box = AABB()
    for v in poly:
        box.grow(v)
    if box.surface_area() <= threshold:
        return [box]

    axis = _largest_axis(box)
    center = (box.max[axis] + box.min[axis]) * 0.5

    last_left = poly[0][axis] < center
    cross_first = cross_second = -1
    for i, v in enumerate(poly):
        left = v[axis] < center
        if left != last_left:
            if cross_first == -1:
                cross_first = i - 1
            else:
                cross_second = i - 1
        last_left = left
    if cross_second == -1:
        cross_second = len(poly) - 1
    if cross_first == -1:
        raise ValueError("polygon does not cross its own split plane")

    def intersection_point(a: int) -> Vec3:
        delta = center - poly[a][axis]
        b = a + 1 if a + 1 < len(poly) else 0
        return poly[a] + (poly[b] - poly[a]) * (delta / (poly[b][axis] - poly[a][axis]))

    cross1 = intersection_point(cross_first)
    cross2 = intersection_point(cross_second)
    poly1 = [*poly[: cross_first + 1], cross1, cross2, *poly[cross_second + 1 :]]
    poly2 = [cross1, *poly[cross_first + 1 : cross_second + 1], cross2]

    return split_polygon(_dedup_consecutive(poly1), threshold) + split_polygon(
        _dedup_consecutive(poly2), threshold
    )


class BvhBuilder(ABC):
    """Common driver for the binary hierarchy constructions."""

    def __init__(
        self,
        mesh: Mesh,
        max_triangles_per_node: int = 1,
        layout: TriangleLayout = TriangleLayout.INDEXED,
    ) -> None:
        self.mesh = mesh
        self.max_triangles_per_node = max_triangles_per_node
        self.layout = layout
        self.esc = False

    def build(self, esc: bool) -> Bvh:
        """Build the hierarchy, optionally with early split clipping."""
        if not self.mesh.triangles:
            raise ValueError("cannot build a hierarchy over an empty mesh")
        bvh = Bvh()
        prims: List[Prim] = []
        for i, tri in enumerate(self.mesh.triangles):
            prim = Prim(tri_index=i)
            for v in self.mesh.positions(tri):
                prim.grow(v)
            prims.append(prim)
        index = list(range(len(prims)))

        self.esc = esc
        if esc:
            self.early_split_clipping(prims, index)

        bvh.root = self.subdivide(bvh, prims, index, 0, len(prims))
        self._commit_shuffled_triangles(bvh, prims, index)
        return bvh

    def early_split_clipping(self, prims: List[Prim], index: List[int]) -> None:
        """Split triangles with large boxes into several tighter boxes, appended to prims."""
        areas = sorted(p.surface_area() for p in prims)
        threshold = areas[9 * len(areas) // 10]
        count = len(prims)
        for i in range(count):
            tri = self.mesh.triangles[index[i]]
            generated = split_polygon(list(self.mesh.positions(tri)), threshold)
            first = generated[0]
            prims[i] = Prim(min=first.min, max=first.max, tri_index=i)
            for box in generated[1:]:
                prims.append(Prim(min=box.min, max=box.max, tri_index=i))
                index.append(len(prims) - 1)

    def _commit_shuffled_triangles(
        self, bvh: Bvh, prims: List[Prim], index: List[int]
    ) -> None:
        if self.layout is TriangleLayout.FLAT:
            old = self.mesh.triangles
            self.mesh.replace_triangles(old[prims[i].tri_index] for i in index)
        else:
            if self.esc:
                index[:] = [prims[i].tri_index for i in index]
            bvh.index = index

    @staticmethod
    def _leaf(bvh: Bvh, start: int, end: int) -> int:
        node_id = len(bvh.nodes)
        node = BvhNode()
        node.make_leaf(start, end - start)
        bvh.nodes.append(node)
        return node_id

    @staticmethod
    def _bounds(prims: List[Prim], index: List[int], start: int, end: int) -> AABB:
        box = AABB()
        for i in index[start:end]:
            box.grow(prims[i])
        return box

    @staticmethod
    def _sort_range(
        index: List[int], start: int, end: int, key: Callable[[int], float]
    ) -> None:
        index[start:end] = sorted(index[start:end], key=key)

    def _inner(
        self,
        bvh: Bvh,
        prims: List[Prim],
        index: List[int],
        start: int,
        mid: int,
        end: int,
        box_l: AABB | None = None,
        box_r: AABB | None = None,
    ) -> int:
        node_id = len(bvh.nodes)
        bvh.nodes.append(BvhNode())
        left = self.subdivide(bvh, prims, index, start, mid)
        right = self.subdivide(bvh, prims, index, mid, end)
        node = bvh.nodes[node_id]
        node.link_l = left
        node.link_r = right
        node.box_l = box_l if box_l is not None else self._bounds(prims, index, start, mid)
        node.box_r = box_r if box_r is not None else self._bounds(prims, index, mid, end)
        return node_id

    @abstractmethod
    def subdivide(
        self, bvh: Bvh, prims: List[Prim], index: List[int], start: int, end: int
    ) -> int:
        """Build the subtree over index[start:end] and return its node id."""


class ObjectMedianBuilder(BvhBuilder):
    """Splits at the median primitive along the largest axis."""

    def subdivide(self, bvh, prims, index, start, end):
        if start >= end:
            raise ValueError("empty primitive range")
        if end - start <= self.max_triangles_per_node:
            return self._leaf(bvh, start, end)
        axis = _largest_axis(self._bounds(prims, index, start, end))
        self._sort_range(index, start, end, lambda j: prims[j].center()[axis])
        mid = start + (end - start) // 2
        return self._inner(bvh, prims, index, start, mid, end)


def _partition(
    index: List[int], start: int, end: int, key: Callable[[int], float], plane: float
) -> int:
    """Move primitives with key <= plane to the front; returns the split position."""
    mid = start
    left, right = start, end - 1
    while left < right:
        while key(index[left]) <= plane and left < right:
            left += 1
            mid += 1
        while key(index[right]) > plane and left < right:
            right -= 1
        if key(index[left]) > key(index[right]) and left < right:
            index[left], index[right] = index[right], index[left]
    return mid


class SpatialMedianBuilder(BvhBuilder):
    """Splits the largest axis in half, falling back to the object median."""

    def subdivide(self, bvh, prims, index, start, end):
        if start >= end:
            raise ValueError("empty primitive range")
        if end - start <= self.max_triangles_per_node:
            return self._leaf(bvh, start, end)
        box = self._bounds(prims, index, start, end)
        axis = _largest_axis(box)

        def key(j: int) -> float:
            return prims[j].center()[axis]

        median = (box.min + (box.max - box.min) * 0.5)[axis]
        mid = _partition(index, start, end, key, median)
        if mid == start or mid == end - 1:
            self._sort_range(index, start, end, key)
            mid = start + (end - start) // 2
        return self._inner(bvh, prims, index, start, mid, end)


class SahBuilder(BvhBuilder):
    """Chooses among evenly spaced split planes by the surface area heuristic."""

    def __init__(
        self,
        mesh: Mesh,
        max_triangles_per_node: int = 1,
        number_of_planes: int = 1,
        layout: TriangleLayout = TriangleLayout.INDEXED,
    ) -> None:
        super().__init__(mesh, max_triangles_per_node, layout)
        self.number_of_planes = number_of_planes

    def subdivide(self, bvh, prims, index, start, end):
        if start >= end:
            raise ValueError("empty primitive range")
        if end - start <= self.max_triangles_per_node:
            return self._leaf(bvh, start, end)

        box = self._bounds(prims, index, start, end)
        box_surf = box.surface_area()
        axis = _largest_axis(box)
        extent = box.max - box.min

        def key(j: int) -> float:
            return prims[j].center()[axis]

        if box_surf == 0:
            self._sort_range(index, start, end, key)
            mid = start + (end - start) // 2
            box_l = self._bounds(prims, index, start, mid)
            box_r = self._bounds(prims, index, mid, end)
            return self._inner(bvh, prims, index, start, mid, end, box_l, box_r)

        best_cost = 2.0 * FLT_MAX
        mid = start
        box_l, box_r = AABB(), AABB()
        use_om = True

        def split(plane: float) -> None:
            nonlocal best_cost, mid, box_l, box_r, use_om
            current_mid = _partition(index, start, end, key, plane)
            if current_mid == start or current_mid == end - 1:
                if not use_om:
                    return
                self._sort_range(index, start, end, key)
                current_mid = start + (end - start) // 2
                use_om = False
            cur_l = self._bounds(prims, index, start, current_mid)
            cur_r = self._bounds(prims, index, current_mid, end)
            cost = (cur_l.surface_area() / box_surf) * (current_mid - start) + (
                cur_r.surface_area() / box_surf
            ) * (end - current_mid)
            if cost < best_cost:
                best_cost = cost
                box_l, box_r = cur_l, cur_r
                mid = current_mid

        planes = min(self.number_of_planes, end - start)
        step = extent[axis] / (planes + 1)
        for i in range(planes):
            split(box.min[axis] + (i + 1) * step)

        if self.max_triangles_per_node > 1:
            count = end - start
            if _K_I * count < _K_T + _K_I * best_cost and count <= self.max_triangles_per_node:
                return self._leaf(bvh, start, end)

        return self._inner(bvh, prims, index, start, mid, end, box_l, box_r)