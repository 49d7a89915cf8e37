"""Taichi path tracer for static sphere and plane scenes.

This package renders scenes described in a small line-oriented text format
using Monte Carlo path tracing. Surfaces are perfectly diffuse and the only
light source is an implicit sky gradient.

Subpackages:
    core: Vector/color utilities, the shading integrator and rendering loop
    geometry: Sphere and plane primitives with ray intersection
    scene: Surface storage, nearest-hit queries and the scene file parser
    camera: Pinhole camera with ray generation
    preview: PNG export of the quantized pixel buffer

Modules:
    config: Render settings and Taichi backend initialization
    cli: Command-line entry point
"""

__version__ = "0.1.0"
