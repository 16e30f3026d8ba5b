"""An offline Monte-Carlo path tracer: BVH, spheres, quads, triangle meshes,
participating media and light importance sampling."""

__version__ = "0.1.0"
