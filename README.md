# raykit

Building blocks for a CPU ray tracer, in pure Python with no dependencies.

## What is inside

- `raykit.util` – an immutable `Vec3` type (with `dot` and `length`) and
  shading helpers: `cdot` (dot product clamped to zero), `absdot`,
  `fresnel_dielectric`, `refract` (returns `None` on total internal
  reflection), trigonometric helpers on cosines (`sin_theta`, `tan_theta`,
  `cos2_theta`, ...), `theta_z`, `to_spherical` / `to_cartesian`, `align`
  (turns a tangent-space sample onto an axis), `flip_normal_to_ray`,
  `bary_interpol`, and single precision helpers `int_as_float`,
  `float_as_int`, `nextafter_toward` and `offset_ray_origin`.
- `raykit.color` – `luma` and a blue-to-red `heatmap` for values in [0, 1].
- `raykit.sampling` – `uniform_sample_disk`, `uniform_sample_hemisphere`,
  `cosine_sample_hemisphere` and `uniform_sample_triangle`, with
  `uniform_hemisphere_pdf` and `cosine_hemisphere_pdf`.
- `raykit.intersect` – `Ray`, `Triangle`, `Mesh`, `AABB` and
  `TriangleIntersection`; `intersect_triangle` and four ray/box tests
  (`intersect_box`, `intersect_box_slabs`, `intersect_box_reciprocal`,
  `intersect_box_precomputed`), each returning the hit or entry distance, or
  `None` on a miss; and `offset_ray`.
- `raykit.bvh_build` – binary BVH construction: `ObjectMedianBuilder`,
  `SpatialMedianBuilder` and `SahBuilder`, optionally with early split
  clipping of large triangles (`build(esc=True)`, helped by
  `split_polygon`). With `TriangleLayout.INDEXED` leaves refer to triangles
  through `Bvh.index`; with `TriangleLayout.FLAT` the mesh's triangle list is
  replaced by the reordered one.
- `raykit.seq` – the `RayTracer` interface (`build`, `closest_hit`,
  `any_hit`) and `SequentialTracer`, which tests every triangle.
- `raykit.naive_bvh` – `NaiveBvh`, one triangle per leaf; it reorders the
  mesh's triangles in place while building.
- `raykit.binary_bvh` – `BinaryBvhTracer`, a configurable binary BVH tracer
  with near-child-first traversal. `node_stats()` returns a `NodeStats`
  summary of triangles per leaf and `export_bvh(filename, max_depth)` writes
  the boxes of the hierarchy as an OBJ file.

## Example

```python
from raykit.intersect import Mesh, Ray, Triangle
from raykit.util import Vec3
from raykit.binary_bvh import BinaryBvhTracer

mesh = Mesh(
    vertices=[Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0)],
    triangles=[Triangle(0, 1, 2)],
)

tracer = BinaryBvhTracer()
tracer.interprete("bvh", ["sah", "4"])
tracer.build(mesh)

hit = tracer.closest_hit(Ray(Vec3(0.2, 0.2, 1), Vec3(0, 0, -1)))
if hit.valid():
    print(hit.t, hit.beta, hit.gamma, hit.ref)
```

`SequentialTracer` and `NaiveBvh` offer the same `build`, `closest_hit` and
`any_hit` methods, so they can be swapped in to compare results.

## Configuring `BinaryBvhTracer`

`interprete(command, args)` takes a command name and its arguments, either as
one string or as a list of tokens. It returns `False` for any command other
than `bvh`, and raises `ValueError` on a malformed or unknown subcommand.

| arguments                   | effect                                        |
|-----------------------------|-----------------------------------------------|
| `om`                        | object-median splits (the default)            |
| `sm`                        | spatial-median splits                         |
| `sah N`                     | surface area heuristic with `N` split planes  |
| `triangles single`          | one triangle per leaf                         |
| `triangles multiple N`      | up to `N` triangles per leaf                  |
| `statistics`                | prints the leaf statistics                    |
| `export DEPTH file.obj`     | writes the boxes down to `DEPTH` to the file  |

The constructor chooses the triangle layout and whether early split clipping
is used: `BinaryBvhTracer(layout=TriangleLayout.INDEXED, esc=False)`.

## What it does not do

raykit answers ray queries against a triangle mesh. It does not load scene
files, hold cameras, materials or lights, render images, or provide a
command-line program.

## Installation

    pip install .

## Running the tests

    pip install .[test]
    pytest