"""
Built-in demo scenes.

Each scene builder returns the world together with the camera keyword
arguments that frame it; the aspect ratio is left to the caller.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Tuple

import numpy as np

from .vec3 import Vec3, Point3, Color
from .shapes import Sphere, World
from .materials import Lambertian, Metal, Dielectric

Scene = Tuple[World, Dict[str, Any]]


def red_matte_scene() -> Scene:
    """A dark red matte sphere resting on a huge ground sphere."""
    world = World()
    red_matte = Lambertian(Color(0.3, 0.0, 0.0))
    world.add(Sphere(Point3(0, 0, -1), 0.5, red_matte))
    world.add(Sphere(Point3(0, -100.5, -1), 100, red_matte))

    camera = dict(
        look_from=Point3(0, 0, 0),
        look_at=Point3(0, 0, -1),
        vfov=90,
    )
    return world, camera


def materials_scene() -> Scene:
    """Diffuse, hollow glass and fuzzy metal spheres side by side."""
    world = World()

    ground = Lambertian(Color(0.8, 0.8, 0.0))
    center = Lambertian(Color(0.1, 0.2, 0.5))
    glass = Dielectric(1.5)
    metal = Metal(Color(0.8, 0.6, 0.2), 0.3)

    world.add(Sphere(Point3(0, -100.5, -1), 100, ground))
    world.add(Sphere(Point3(0, 0, -1), 0.5, center))
    # Negative inner radius turns the glass ball into a bubble
    world.add(Sphere(Point3(-1, 0, -1), 0.5, glass))
    world.add(Sphere(Point3(-1, 0, -1), -0.4, glass))
    world.add(Sphere(Point3(1, 0, -1), 0.5, metal))

    look_from = Point3(3, 3, 2)
    look_at = Point3(0, 0, -1)
    camera = dict(
        look_from=look_from,
        look_at=look_at,
        vfov=20,
        aperture=0.5,
        focus_dist=(look_from - look_at).length(),
    )
    return world, camera


def random_scene(seed: int = 0) -> Scene:
    """A field of small random spheres around three large ones."""
    rng = np.random.default_rng(seed)
    world = World()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))

    glass = Dielectric(1.5)
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = Vec3.random(rng=rng) * Vec3.random(rng=rng)
                material = Lambertian(albedo)
            elif choose_mat < 0.95:
                material = Metal(Vec3.random(0.5, 1, rng), 0.5 * rng.random())
            else:
                material = glass
            world.add(Sphere(center, 0.2, material))

    world.add(Sphere(Point3(0, 1, 0), 1.0, glass))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    camera = dict(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vfov=20,
        aperture=0.1,
        focus_dist=10.0,
    )
    return world, camera


SCENES: Dict[str, Callable[[], Scene]] = {
    'red': red_matte_scene,
    'materials': materials_scene,
    'random': random_scene,
}
