"""
Path tracing integrator.

Estimates the radiance carried back along a ray by following it through
the world, letting each hit material scatter it until the path is absorbed,
escapes to the sky or runs out of bounces.
"""

from __future__ import annotations
from typing import Optional

import numpy as np

from .vec3 import Color
from .ray import Ray
from .shapes import World
from .materials import scatter

# Bounced rays start on the surface they left; ignore hits closer than this
SHADOW_ACNE_EPSILON = 0.001

WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


def sky_color(ray: Ray) -> Color:
    """Blend white at the horizon into sky blue overhead."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t


def ray_color(ray: Ray, world: World, depth: int,
              rng: Optional[np.random.Generator] = None) -> Color:
    """Compute the color for a ray using path tracing.

    Args:
        ray: The ray to trace
        world: The scene to trace against
        depth: Remaining bounce budget; at zero the path contributes black
        rng: Random generator owned by the calling worker

    Returns:
        One radiance sample along this ray
    """
    if depth <= 0:
        return Color(0, 0, 0)

    rec = world.hit(ray, SHADOW_ACNE_EPSILON, float('inf'))
    if rec is None:
        return sky_color(ray)

    result = scatter(rec.material, ray, rec, rng)
    if result is None:
        return Color(0, 0, 0)
    return result.attenuation * ray_color(result.scattered_ray, world, depth - 1, rng)
