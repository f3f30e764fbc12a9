"""Whitted-style ray tracer built on Taichi.

Renders scenes of spheres, planes and spherical lights with mirror
reflection, refraction with absorption, hard shadows and Phong lighting,
followed by edge-adaptive supersampling.

Subpackages:
    core: Rays, framebuffer, light transport and the render pipeline
    materials: Material description and registry
    geometry: Sphere and plane primitives
    scene: Scene container, object storage and example scenes
    camera: Pinhole camera
    preview: Image export and preview
"""

__version__ = "0.1.0"
