"""
Renderer module - drives the path tracer over a whole image.

Implements:
- Per-pixel sample averaging with jittered antialiasing
- Multi-threaded tile-based rendering with per-tile random streams
- 8-bit conversion and image encoding
"""

from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Callable, Tuple
import numpy as np

from .vec3 import Color
from .camera import Camera
from .shapes import World
from .integrator import ray_color

logger = logging.getLogger(__name__)

Tile = Tuple[int, int, int, int]


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = 5
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width < 2 or self.height < 2:
            raise ValueError(f"image must be at least 2x2, got {self.width}x{self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must not be negative, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, world: World, camera: Camera) -> np.ndarray:
        """Render the world and return the averaged linear image.

        Each tile draws from its own generator spawned from the settings
        seed, so a seeded render is identical for any thread count. The progress
        callback is always invoked on the calling thread.

        Args:
            world: The surfaces to render
            camera: The camera to render from

        Returns:
            Image as numpy array of shape (height, width, 3), row 0 at the top
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        seeds = np.random.SeedSequence(self.settings.seed).spawn(total_tiles)

        logger.info(
            "Rendering %dx%d, %d samples, depth %d, %d tiles on %d threads",
            width, height, samples, max_depth, total_tiles, self.settings.num_threads,
        )

        def render_tile(tile: Tile, seed: np.random.SeedSequence) -> np.ndarray:
            """Render a single tile."""
            rng = self._tile_rng(seed)
            x0, y0, x1, y1 = tile
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            for j in range(y1 - y0):
                for i in range(x1 - x0):
                    pixel_color = Color(0, 0, 0)

                    for _ in range(samples):
                        u = (x0 + i + rng.random()) / (width - 1)
                        v = (height - 1 - (y0 + j) + rng.random()) / (height - 1)

                        ray = camera.get_ray(u, v, rng)
                        pixel_color = pixel_color + ray_color(ray, world, max_depth, rng)

                    tile_image[j, i] = pixel_color.to_array() / samples

            return tile_image

        def tile_done(tile: Tile, tile_image: np.ndarray, completed: int) -> None:
            # Runs on the calling thread only
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image
            logger.debug("Tile %s done (%d/%d)", tile, completed, total_tiles)
            if self._progress_callback:
                self._progress_callback(completed / total_tiles)

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                futures = {
                    executor.submit(render_tile, tile, seed): tile
                    for tile, seed in zip(tiles, seeds)
                }
                for completed, future in enumerate(as_completed(futures), start=1):
                    tile_done(futures[future], future.result(), completed)
        else:
            for completed, (tile, seed) in enumerate(zip(tiles, seeds), start=1):
                tile_done(tile, render_tile(tile, seed), completed)

        return image

    def _tile_rng(self, seed: np.random.SeedSequence) -> np.random.Generator:
        """Create the generator that a single tile draws all its samples from."""
        return np.random.default_rng(seed)

    def _generate_tiles(self, width: int, height: int) -> list[Tile]:
        """Generate tiles for parallel rendering.

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    @staticmethod
    def to_ldr(image: np.ndarray) -> np.ndarray:
        """Convert an averaged linear image to 8-bit with gamma 2.

        Matches ``Vec3.to_rgb`` pixel for pixel.

        Args:
            image: Linear image array (float)

        Returns:
            LDR image as uint8 array
        """
        corrected = np.sqrt(np.clip(np.nan_to_num(image, nan=0.0), 0.0, None))
        return (np.clip(corrected, 0.0, 0.999) * 256).astype(np.uint8)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (linear float or uint8)
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        if image.dtype != np.uint8:
            image = self.to_ldr(image)

        PILImage.fromarray(image).save(filename)
        logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filename)
