"""
Geometric shapes for the ray tracer.

The set of surfaces is closed: ``Hittable`` is a union of the concrete
shape classes and ``hit`` is the single function that dispatches over it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, Union, get_args
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: The surface normal at the intersection (always points against ray)
        t: The ray parameter at intersection
        front_face: True if ray hit from outside the object
        material: The material at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Optional[Material] = None

    def set_face_normal(self, ray: Ray, outward_normal: Vec3) -> None:
        """Set the normal to always point against the ray direction.

        Args:
            ray: The incoming ray
            outward_normal: The geometric normal pointing outward from surface
        """
        self.front_face = ray.direction.dot(outward_normal) < 0
        self.normal = outward_normal if self.front_face else -outward_normal


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center and radius.

    A negative radius flips the outward normal inwards, which together with
    an enclosing sphere of the same material models a hollow shell.
    """
    center: Point3
    radius: float
    material: Material

    def __post_init__(self):
        if not isinstance(self.material, get_args(Material)):
            raise TypeError(f"not a material: {type(self.material).__name__}")

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        return hit(self, ray, t_min, t_max)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


Hittable = Union[Sphere]


def _hit_sphere(sphere: Sphere, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
    """Test ray-sphere intersection using the quadratic formula.

    The equation (P-C)·(P-C) = r² where P = ray.at(t)
    expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
    which is solved with the half-b form of the quadratic formula.
    """
    oc = ray.origin - sphere.center
    a = ray.direction.length_squared()
    half_b = oc.dot(ray.direction)
    c = oc.length_squared() - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c
    if discriminant < 0:
        return None

    sqrtd = math.sqrt(discriminant)

    # Find the nearest root in the acceptable range
    root = (-half_b - sqrtd) / a
    if root < t_min or root > t_max:
        root = (-half_b + sqrtd) / a
        if root < t_min or root > t_max:
            return None

    point = ray.at(root)
    outward_normal = (point - sphere.center) / sphere.radius

    hit_record = HitRecord(
        point=point,
        normal=outward_normal,
        t=root,
        front_face=True,
        material=sphere.material,
    )
    hit_record.set_face_normal(ray, outward_normal)

    return hit_record


def hit(surface: Hittable, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
    """Intersect a ray with any surface.

    Args:
        surface: The surface to test
        ray: The ray to test
        t_min: Minimum t value to consider (avoid self-intersection)
        t_max: Maximum t value to consider

    Returns:
        HitRecord if intersection found, None otherwise
    """
    if isinstance(surface, Sphere):
        return _hit_sphere(surface, ray, t_min, t_max)
    raise TypeError(f"not a hittable surface: {type(surface).__name__}")


class World:
    """An ordered collection of surfaces resolved by nearest hit."""

    def __init__(self, objects: Optional[list[Hittable]] = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add a surface to the world."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Remove all surfaces."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all surfaces.

        Every candidate is tested against the closest t found so far, so
        the result does not depend on insertion order.
        """
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = hit(obj, ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)

    def __repr__(self) -> str:
        return f"World({len(self.objects)} objects)"
