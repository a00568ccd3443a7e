"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- RGB color values
"""

from __future__ import annotations
import math
from typing import Optional, Union
import numpy as np

# Shared generator for callers that do not own one (interactive use, tests).
_default_rng = np.random.default_rng()


def rng_or_default(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else _default_rng


class Vec3:
    """A 3D vector class supporting common vector operations.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    def __hash__(self) -> int:
        return hash(tuple(self._data))

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data + other._data)
        return Vec3.from_array(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3.from_array(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data - other._data)
        return Vec3.from_array(self._data - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3.from_array(other - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data / other._data)
        return Vec3.from_array(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return (float(c) for c in self._data)

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        The zero vector has no direction; it is returned unchanged.
        """
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this vector around the given normal."""
        return self - normal * 2 * self.dot(normal)

    def refract(self, normal: Vec3, eta_ratio: float) -> Vec3:
        """Refract this unit vector through a surface following Snell's law.

        Args:
            normal: Unit surface normal facing the incoming vector
            eta_ratio: Ratio of refractive indices (n1/n2)

        Returns:
            Refracted direction. Total internal reflection is not detected
            here; callers check ``eta_ratio * sin_theta > 1`` beforehand.
        """
        cos_theta = min(-self.dot(normal), 1.0)
        r_out_perp = (self + normal * cos_theta) * eta_ratio
        # abs() keeps the root real when rounding pushes |perp|^2 past 1
        r_out_parallel = normal * (-math.sqrt(abs(1.0 - r_out_perp.length_squared())))
        return r_out_perp + r_out_parallel

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return bool(np.all(np.abs(self._data) < epsilon))

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    def to_rgb(self, samples_per_pixel: int) -> tuple[int, int, int]:
        """Convert an accumulated color sum to an 8-bit pixel.

        The sum is averaged over the samples, gamma corrected with
        gamma 2 and clamped to [0, 0.999] before scaling to 0..255.
        Negative and NaN channels come out as 0.
        """
        averaged = np.nan_to_num(self._data / samples_per_pixel, nan=0.0)
        scaled = np.sqrt(np.clip(averaged, 0.0, None))
        r, g, b = (int(256 * c) for c in np.clip(scaled, 0.0, 0.999))
        return r, g, b

    @staticmethod
    def random(min_val: float = 0.0, max_val: float = 1.0,
               rng: Optional[np.random.Generator] = None) -> Vec3:
        """Generate a random vector with components in [min_val, max_val)."""
        return Vec3.from_array(rng_or_default(rng).uniform(min_val, max_val, 3))

    @staticmethod
    def random_in_unit_sphere(rng: Optional[np.random.Generator] = None) -> Vec3:
        """Generate a random point inside the unit sphere."""
        rng = rng_or_default(rng)
        while True:
            p = Vec3.random(-1, 1, rng)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_unit_vector(rng: Optional[np.random.Generator] = None) -> Vec3:
        """Generate a random unit vector (uniform on sphere surface)."""
        return Vec3.random_in_unit_sphere(rng).normalize()

    @staticmethod
    def random_in_unit_disk(rng: Optional[np.random.Generator] = None) -> Vec3:
        """Generate a random point inside the unit disk (z=0)."""
        rng = rng_or_default(rng)
        while True:
            x, y = rng.uniform(-1, 1, 2)
            p = Vec3(x, y, 0)
            if p.length_squared() < 1:
                return p


# Convenience type aliases
Point3 = Vec3
Color = Vec3
