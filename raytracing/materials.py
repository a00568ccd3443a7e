"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

Materials are immutable and shared between spheres and render threads.
``scatter`` is the single dispatch point over the closed set of variants.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union, TYPE_CHECKING
import math

import numpy as np

from .vec3 import Vec3, Color, rng_or_default
from .ray import Ray

if TYPE_CHECKING:
    from .shapes import HitRecord


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered_ray: Ray


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material with Lambertian (ideal matte) scattering.

    Attributes:
        albedo: The base color (RGB, each component 0-1)
    """
    albedo: Color

    def scatter(self, ray_in: Ray, rec: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        return scatter(self, ray_in, rec, rng)


@dataclass(frozen=True)
class Metal:
    """Metallic material with specular reflection.

    Attributes:
        albedo: The reflection color
        fuzz: Radius of the reflection blur (0 = mirror, clamped to 1)
    """
    albedo: Color
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'fuzz', min(self.fuzz, 1.0))

    def scatter(self, ray_in: Ray, rec: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        return scatter(self, ray_in, rec, rng)


@dataclass(frozen=True)
class Dielectric:
    """Dielectric (glass-like) material with refraction.

    Attributes:
        index_of_refraction: 1.0 = air, 1.5 = glass, 2.4 = diamond
    """
    index_of_refraction: float = 1.5

    def scatter(self, ray_in: Ray, rec: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        return scatter(self, ray_in, rec, rng)


Material = Union[Lambertian, Metal, Dielectric]


def reflectance(cosine: float, refraction_ratio: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - refraction_ratio) / (1 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


def _scatter_lambertian(mat: Lambertian, ray_in: Ray, rec: HitRecord,
                        rng: np.random.Generator) -> ScatterResult:
    scatter_direction = rec.normal + Vec3.random_unit_vector(rng)

    # Catch degenerate scatter direction
    if scatter_direction.near_zero():
        scatter_direction = rec.normal

    return ScatterResult(
        attenuation=mat.albedo,
        scattered_ray=Ray(rec.point, scatter_direction.normalize()),
    )


def _scatter_metal(mat: Metal, ray_in: Ray, rec: HitRecord,
                   rng: np.random.Generator) -> Optional[ScatterResult]:
    reflected = ray_in.direction.normalize().reflect(rec.normal).normalize()
    if mat.fuzz > 0:
        reflected = reflected + Vec3.random_in_unit_sphere(rng) * mat.fuzz

    # Fuzz can push the ray below the surface; treat it as absorbed
    if reflected.dot(rec.normal) <= 0:
        return None
    return ScatterResult(attenuation=mat.albedo, scattered_ray=Ray(rec.point, reflected))


def _scatter_dielectric(mat: Dielectric, ray_in: Ray, rec: HitRecord,
                        rng: np.random.Generator) -> ScatterResult:
    ior = mat.index_of_refraction
    refraction_ratio = 1.0 / ior if rec.front_face else ior

    unit_direction = ray_in.direction.normalize()
    cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
    sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = refraction_ratio * sin_theta > 1.0

    if cannot_refract or reflectance(cos_theta, refraction_ratio) > rng.random():
        direction = unit_direction.reflect(rec.normal)
    else:
        direction = unit_direction.refract(rec.normal, refraction_ratio)

    return ScatterResult(
        attenuation=Color(1.0, 1.0, 1.0),
        scattered_ray=Ray(rec.point, direction),
    )


def scatter(material: Material, ray_in: Ray, rec: HitRecord,
            rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
    """Compute the scattered ray and attenuation for a hit.

    Args:
        material: The material at the hit point
        ray_in: The incoming ray
        rec: Hit record produced by the surface intersection
        rng: Random generator owned by the calling worker

    Returns:
        ScatterResult if ray scatters, None if absorbed
    """
    rng = rng_or_default(rng)
    if isinstance(material, Lambertian):
        return _scatter_lambertian(material, ray_in, rec, rng)
    if isinstance(material, Metal):
        return _scatter_metal(material, ray_in, rec, rng)
    if isinstance(material, Dielectric):
        return _scatter_dielectric(material, ray_in, rec, rng)
    raise TypeError(f"not a material: {type(material).__name__}")
