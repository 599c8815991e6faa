"""Taichi-based Monte Carlo path tracer.

This package renders scenes of spheres by stochastically sampling light
transport paths on the Taichi runtime, with support for:
- Diffuse, metallic, refractive and normal-visualization materials
- Thin-lens camera with depth of field and shutter-time motion blur
- Stratified antialiasing and data-parallel pixel evaluation
- Per-pixel render statistics merged into a grand total

Subpackages:
    core: Rays, random streams, render parameters, the integrator and renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Closed set of scattering materials and the GPU material table
    scene: Scene building, nearest-hit queries, setup files and preset scenes
    camera: Thin-lens camera compilation and ray generation
    preview: Image export
"""

__version__ = "0.1.0"
