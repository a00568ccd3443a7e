"""Tests for Renderer class."""

import threading
from pathlib import Path

import pytest
import numpy as np
from PIL import Image

from raytracing.vec3 import Vec3, Point3, Color
from raytracing.camera import Camera
from raytracing.shapes import Sphere, World
from raytracing.materials import Lambertian
from raytracing.renderer import Renderer, RenderSettings
from raytracing.scenes import red_matte_scene


# Red matte scene rendered with golden_settings() and every draw at the
# middle of its range; one image row per line.
REFERENCE_PIXELS = Path(__file__).parent / "data" / "red_matte_40x22.txt"


class MidpointGenerator:
    """Stand-in for numpy.random.Generator that always draws mid-range."""

    def random(self, size=None):
        return 0.5 if size is None else np.full(size, 0.5)

    def uniform(self, low=0.0, high=1.0, size=None):
        middle = (low + high) / 2
        return middle if size is None else np.full(size, middle)


def golden_settings(**kwargs):
    params = dict(
        width=40,
        height=22,
        samples_per_pixel=4,
        max_depth=5,
        tile_size=8,
        num_threads=1,
        seed=20240601,
    )
    params.update(kwargs)
    return RenderSettings(**params)


def render_red_scene(settings):
    world, camera_args = red_matte_scene()
    camera = Camera(aspect_ratio=settings.aspect_ratio, **camera_args)
    return Renderer(settings).render(world, camera)


class TestRenderSettings:
    """Test RenderSettings configuration."""

    def test_default_values(self):
        settings = RenderSettings()
        assert settings.width == 400
        assert settings.height == 225
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 5
        assert settings.seed is None

    def test_custom_values(self):
        settings = RenderSettings(width=1920, height=1080, samples_per_pixel=500, max_depth=50)
        assert settings.width == 1920
        assert settings.height == 1080
        assert settings.aspect_ratio == pytest.approx(16 / 9)

    def test_auto_thread_detection(self):
        settings = RenderSettings(num_threads=0)
        import os
        assert settings.num_threads == (os.cpu_count() or 4)

    @pytest.mark.parametrize("kwargs", [
        dict(width=1),
        dict(height=0),
        dict(samples_per_pixel=0),
        dict(max_depth=-1),
        dict(tile_size=0),
        dict(num_threads=-2),
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_zero_depth_allowed(self):
        assert RenderSettings(max_depth=0).max_depth == 0


class TestRendererBasic:
    """Test basic renderer functionality."""

    def test_render_produces_image(self):
        settings = RenderSettings(width=10, height=10, samples_per_pixel=1, max_depth=2,
                                  num_threads=1, seed=1)
        world = World([Sphere(Point3(0, 0, -5), 1.0, Lambertian(Color(1, 0, 0)))])
        camera = Camera(aspect_ratio=1.0)

        image = Renderer(settings).render(world, camera)

        assert image.shape == (10, 10, 3)
        assert image.dtype == np.float64

    def test_sky_gradient(self):
        settings = RenderSettings(width=10, height=10, samples_per_pixel=1, max_depth=1,
                                  num_threads=1, seed=2)
        camera = Camera(aspect_ratio=1.0)

        image = Renderer(settings).render(World(), camera)

        # Top rows look further up, into the bluer part of the sky
        assert image[0, 5, 0] < image[9, 5, 0]
        assert np.allclose(image[:, :, 2], 1.0)

    def test_zero_depth_renders_black(self):
        settings = RenderSettings(width=6, height=4, samples_per_pixel=2, max_depth=0,
                                  num_threads=1, seed=3)
        image = Renderer(settings).render(World(), Camera(aspect_ratio=1.5))
        assert not image.any()

    def test_tiles_cover_image(self):
        renderer = Renderer(RenderSettings(width=70, height=33, tile_size=32, num_threads=1))
        tiles = renderer._generate_tiles(70, 33)

        covered = np.zeros((33, 70), dtype=int)
        for x0, y0, x1, y1 in tiles:
            covered[y0:y1, x0:x1] += 1
        assert (covered == 1).all()
        assert len(tiles) == 6

    def test_progress_callback(self):
        settings = RenderSettings(width=8, height=8, samples_per_pixel=1, max_depth=1,
                                  tile_size=4, num_threads=1, seed=4)
        renderer = Renderer(settings)
        progress = []
        renderer.set_progress_callback(progress.append)

        renderer.render(World(), Camera(aspect_ratio=1.0))

        assert len(progress) == 4
        assert progress == sorted(progress)
        assert progress[-1] == pytest.approx(1.0)

    def test_progress_reported_on_calling_thread(self):
        settings = RenderSettings(width=16, height=16, samples_per_pixel=1, max_depth=1,
                                  tile_size=4, num_threads=4, seed=5)
        renderer = Renderer(settings)
        calls = []
        renderer.set_progress_callback(lambda p: calls.append((threading.get_ident(), p)))

        renderer.render(World(), Camera(aspect_ratio=1.0))

        assert {ident for ident, _ in calls} == {threading.get_ident()}
        assert [p for _, p in calls] == [n / 16 for n in range(1, 17)]


class TestGoldenImage:
    """Seeded renders of the red matte scene are reproducible."""

    def test_same_seed_same_pixels(self):
        a = Renderer.to_ldr(render_red_scene(golden_settings()))
        b = Renderer.to_ldr(render_red_scene(golden_settings()))
        assert a.shape == (22, 40, 3)
        assert a.dtype == np.uint8
        assert np.array_equal(a, b)

    def test_independent_of_thread_count(self):
        serial = render_red_scene(golden_settings(num_threads=1))
        threaded = render_red_scene(golden_settings(num_threads=4))
        assert np.array_equal(serial, threaded)

    def test_different_seed_different_noise(self):
        a = render_red_scene(golden_settings(seed=1))
        b = render_red_scene(golden_settings(seed=2))
        assert not np.array_equal(a, b)

    @pytest.mark.parametrize("threads", [1, 3])
    def test_matches_reference_pixels(self, monkeypatch, threads):
        monkeypatch.setattr(Renderer, "_tile_rng", lambda self, seed: MidpointGenerator())
        expected = np.loadtxt(REFERENCE_PIXELS, dtype=np.uint8).reshape(22, 40, 3)

        pixels = Renderer.to_ldr(render_red_scene(golden_settings(num_threads=threads)))

        assert np.array_equal(pixels, expected)

    def test_image_content(self):
        pixels = Renderer.to_ldr(render_red_scene(golden_settings()))

        # Top row sees only sky: blue saturates, red stays lower
        assert (pixels[0, :, 2] == 255).all()
        assert (pixels[0, :, 0] < 255).all()

        # Centre and bottom rows see red matte only
        for row, col in ((11, 20), (21, 0), (21, 39)):
            r, g, b = pixels[row, col]
            assert g == 0 and b == 0
            assert r > 0


class TestImageOutput:
    """Test 8-bit conversion and saving."""

    def test_to_ldr_matches_to_rgb(self):
        rng = np.random.default_rng(0)
        image = rng.random((3, 4, 3)) * 1.5
        image[0, 0] = (-0.5, np.nan, 0.25)
        image[2, 3] = (np.nan, -1e-9, -3.0)
        ldr = Renderer.to_ldr(image)

        for j in range(3):
            for i in range(4):
                assert tuple(ldr[j, i]) == Vec3.from_array(image[j, i]).to_rgb(1)

    def test_to_ldr_clamps(self):
        image = np.array([[[-1.0, 0.0, 5.0], [np.nan, 0.25, -np.inf]]])
        ldr = Renderer.to_ldr(image)
        assert tuple(ldr[0, 0]) == (0, 0, 255)
        assert tuple(ldr[0, 1]) == (0, 128, 0)

    @pytest.mark.parametrize("suffix", [".png", ".ppm"])
    def test_save_image(self, tmp_path, suffix):
        image = np.zeros((4, 6, 3), dtype=np.float64)
        image[:, :, 0] = 0.25
        path = tmp_path / f"out{suffix}"

        Renderer(RenderSettings(num_threads=1)).save_image(image, str(path))

        with Image.open(path) as saved:
            assert saved.size == (6, 4)
            assert saved.mode == 'RGB'
            assert saved.getpixel((0, 0)) == (128, 0, 0)

    def test_save_uint8_as_is(self, tmp_path):
        image = np.full((2, 2, 3), 7, dtype=np.uint8)
        path = tmp_path / "raw.png"
        Renderer(RenderSettings(num_threads=1)).save_image(image, str(path))
        with Image.open(path) as saved:
            assert saved.getpixel((1, 1)) == (7, 7, 7)
