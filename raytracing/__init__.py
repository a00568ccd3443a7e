"""
raytracing - A Monte Carlo path tracer

Renders scenes of spheres with:
- Lambertian, metal and dielectric materials
- Sky gradient lighting
- Thin lens depth of field
- Multi-threaded, reproducible (seeded) rendering
- PNG/PPM/JPEG output through Pillow
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import HitRecord, Hittable, Sphere, World, hit
from .materials import Material, Lambertian, Metal, Dielectric, ScatterResult, scatter, reflectance
from .camera import Camera
from .integrator import ray_color, sky_color
from .renderer import Renderer, RenderSettings
from .scenes import SCENES
