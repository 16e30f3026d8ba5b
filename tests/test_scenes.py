"""Tests for the demo scenes and the command line entry point."""

import logging
import math

import pytest
from PIL import Image

from pathtracer import config
from pathtracer.camera.camera import Camera, ImageSettings
from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Point3, Vector3
from pathtracer.logging_config import setup_logging
from pathtracer.main import apply_overrides, main, parse_args
from pathtracer.materials.metal import Metal
from pathtracer.renderer.raytracer import Renderer
from pathtracer.scenes import SCENES, Scene, build_scene

pytestmark = pytest.mark.usefixtures("demo_objects")

# final_scene is built separately: it holds a few thousand primitives
LIGHT_SCENES = sorted(name for name in SCENES if name != "final_scene")

CLI_FAST = ["--width", "8", "--samples", "1", "--depth", "2", "--seed", "3", "--quiet"]


class TestScenes:
    """Tests for the scene registry."""

    @pytest.mark.parametrize("name", LIGHT_SCENES)
    def test_scene_builds(self, name):
        scene = build_scene(name, seed=1)
        assert isinstance(scene, Scene)
        assert isinstance(scene.camera(), Camera)
        assert len(scene.world) == 1

    def test_final_scene_builds(self):
        scene = build_scene("final_scene", seed=1)
        assert len(scene.lights) == 1

    def test_lit_scenes_have_lights_and_background(self):
        for name in ("simple_light", "cornell_box", "cornell_smoke"):
            scene = build_scene(name, seed=0)
            assert scene.lights is not None and len(scene.lights) > 0
            assert scene.image_settings.background is not None

    def test_unknown_scene(self):
        with pytest.raises(KeyError):
            build_scene("teapot")

    def test_same_seed_same_layout(self):
        a = build_scene("bouncing_spheres", seed=9).world.bounding_box()
        b = build_scene("bouncing_spheres", seed=9).world.bounding_box()
        assert (a.y.min, a.y.max) == (b.y.min, b.y.max)

    def test_mesh_scene_uses_mtl_materials(self):
        scene = build_scene("cornell_mesh", seed=0)
        # Straight down just beside the apex (370, 150, 330) lands on a gold side
        above = Point3(380, 400, 330)
        rec = scene.world.hit(Ray(above, Vector3(0, -1, 0)), Interval(0.001, math.inf))
        assert rec is not None
        assert isinstance(rec.material, Metal)
        assert 100 < rec.p.y < 150

    def test_mesh_scene_without_assets(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "OBJECT_DIR", str(tmp_path))
        with pytest.raises(FileNotFoundError):
            build_scene("cornell_mesh")

    def test_tiny_cornell_render(self):
        scene = build_scene("cornell_box", seed=0)
        scene.image_settings.image_width = 6
        scene.image_settings.samples_per_pixel = 1
        scene.image_settings.max_depth = 3
        image = Renderer(scene.camera(), scene.world, scene.lights, workers=2, seed=0).render()
        assert image.shape == (6, 6, 3)


class TestCommandLine:
    """Tests for argument handling and the main entry point."""

    def test_defaults(self):
        args = parse_args(["quads"])
        assert args.scene == "quads"
        assert args.output is None
        assert args.quality is None
        assert args.workers == config.RENDER_WORKERS

    def test_unknown_scene_exits(self):
        with pytest.raises(SystemExit) as exc:
            parse_args(["teapot"])
        assert exc.value.code == 2

    def test_non_positive_width_exits(self):
        with pytest.raises(SystemExit):
            parse_args(["quads", "--width", "0"])

    def test_quality_preset_then_flags(self):
        settings = ImageSettings()
        args = parse_args(["quads", "--quality", "preview", "--samples", "2"])
        apply_overrides(settings, args)
        preset = config.QUALITY_LEVELS["preview"]
        assert settings.image_width == preset["width"]
        assert settings.max_depth == preset["depth"]
        assert settings.samples_per_pixel == 2

    def test_edges_flag(self):
        assert parse_args(["quads"]).edges is False
        assert parse_args(["quads", "--edges"]).edges is True

    def test_log_level_is_case_insensitive(self):
        assert parse_args(["quads", "--log-level", "debug"]).log_level == "DEBUG"

    def test_main_writes_image(self, tmp_path):
        output = tmp_path / "renders" / "quads.png"
        code = main(["quads", "-o", str(output), "--width", "8", "--samples", "1",
                     "--depth", "2", "--seed", "3", "--workers", "2", "--quiet"])
        assert code == 0
        with Image.open(output) as img:
            assert img.size == (8, 8)

    def test_main_outlines_edges(self, tmp_path):
        output = tmp_path / "quads.png"
        assert main(["quads", "-o", str(output), "--edges", "--workers", "1"] + CLI_FAST) == 0
        with Image.open(output) as img:
            assert img.size == (6, 6)

    def test_main_reports_missing_mesh(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "OBJECT_DIR", str(tmp_path))
        output = tmp_path / "mesh.png"
        assert main(["cornell_mesh", "-o", str(output)] + CLI_FAST) == 1
        assert not output.exists()


class TestLogging:
    """Tests for logging setup."""

    def test_console_and_file_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "render.log"
        logger = setup_logging("pathtracer.test", level="debug", log_file=log_file)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        logger.debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()
        for handler in logger.handlers:
            handler.close()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging("pathtracer.test2")
        logger = setup_logging("pathtracer.test2")
        assert len(logger.handlers) == 1
