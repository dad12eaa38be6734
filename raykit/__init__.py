"""Ray tracing building blocks: geometry helpers, sampling, intersection tests and BVH tracers."""

__version__ = "0.1.0"
__all__ = [
    "util",
    "color",
    "sampling",
    "intersect",
    "bvh_build",
    "seq",
    "naive_bvh",
    "binary_bvh",
]