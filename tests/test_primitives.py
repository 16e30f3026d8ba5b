"""Unit tests for the geometric primitives.

Tests cover:
- Sphere intersection, face orientation, motion and light sampling
- Quad and Triangle containment, UVs and area-light densities
- Boxes, instancing transforms, OBJ loading and MTL material import
"""

import logging
import math

import pytest
from PIL import Image

from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.geometry.mesh import DEFAULT_MESH_COLOR, Triangle, load_mtl, load_obj
from pathtracer.geometry.quad import Quad, box
from pathtracer.geometry.sphere import Sphere, get_sphere_uv
from pathtracer.geometry.transform import RotateY, Translate
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.textures import ImageTexture

FORWARD = Interval(0.001, math.inf)


class TestSphere:
    """Tests for Sphere."""

    def test_hit_from_outside(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        rec = sphere.hit(Ray(Point3(0, 0, 5), Vector3(0, 0, -1)), FORWARD)
        assert rec is not None
        # Distance to the center minus the radius
        assert rec.t == pytest.approx(4.0)
        assert rec.front_face
        assert rec.normal.z == pytest.approx(1.0)
        assert rec.material is gray

    def test_hit_from_inside(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        rec = sphere.hit(Ray(Point3(0, 0, 0), Vector3(0, 0, -1)), FORWARD)
        assert rec.t == pytest.approx(1.0)
        assert not rec.front_face
        # The normal always opposes the ray
        assert rec.normal.dot(Vector3(0, 0, -1)) < 0

    def test_miss(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        assert sphere.hit(Ray(Point3(0, 2, 5), Vector3(0, 0, -1)), FORWARD) is None

    def test_outside_interval(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        assert sphere.hit(Ray(Point3(0, 0, 5), Vector3(0, 0, -1)), Interval(0.001, 3.0)) is None

    def test_zero_direction_is_miss(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        assert sphere.hit(Ray(Point3(0, 0, 5), Vector3(0, 0, 0)), FORWARD) is None

    def test_negative_radius_clamped(self, gray):
        assert Sphere(Point3(0, 0, 0), -1.0, gray).radius == 0.0

    def test_moving_sphere(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray, Point3(0, 2, 0))
        ray_at_start = Ray(Point3(0, 2, 5), Vector3(0, 0, -1), time=0.0)
        ray_at_end = Ray(Point3(0, 2, 5), Vector3(0, 0, -1), time=1.0)
        assert sphere.hit(ray_at_start, FORWARD) is None
        assert sphere.hit(ray_at_end, FORWARD).t == pytest.approx(4.0)

        bbox = sphere.bounding_box()
        assert bbox.y.min == pytest.approx(-1.0)
        assert bbox.y.max == pytest.approx(3.0)

    def test_uv_poles(self):
        assert get_sphere_uv(Point3(0, 1, 0))[1] == pytest.approx(1.0)
        assert get_sphere_uv(Point3(0, -1, 0))[1] == pytest.approx(0.0)
        assert get_sphere_uv(Point3(1.0, 0.0, 0.0)) == pytest.approx((0.5, 0.5))

    def test_pdf_value_is_cone_solid_angle(self, gray):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        origin = Point3(0, 0, 2)
        cos_theta_max = math.sqrt(1 - 1 / 4)
        expected = 1 / (2 * math.pi * (1 - cos_theta_max))
        assert sphere.pdf_value(origin, Vector3(0, 0, -1)) == pytest.approx(expected)
        assert sphere.pdf_value(origin, Vector3(0, 0, 1)) == 0.0

    def test_random_directions_hit_sphere(self, gray, rng):
        sphere = Sphere(Point3(0, 0, 0), 1.0, gray)
        origin = Point3(0, 0, 4)
        for _ in range(100):
            direction = sphere.random(origin, rng)
            assert sphere.hit(Ray(origin, direction), FORWARD) is not None


def square():
    """A 2x2 quad in the z=0 plane centered at the origin, facing +z."""
    return Quad(Point3(-1, -1, 0), Vector3(2, 0, 0), Vector3(0, 2, 0), None)


class TestQuad:
    """Tests for Quad."""

    def test_hit_center(self):
        rec = square().hit(Ray(Point3(0, 0, 5), Vector3(0, 0, -1)), FORWARD)
        assert rec.t == pytest.approx(5.0)
        assert (rec.u, rec.v) == pytest.approx((0.5, 0.5))
        assert rec.front_face
        assert rec.normal.z == pytest.approx(1.0)

    def test_back_face(self):
        rec = square().hit(Ray(Point3(0, 0, -5), Vector3(0, 0, 1)), FORWARD)
        assert not rec.front_face
        assert rec.normal.z == pytest.approx(-1.0)

    def test_outside_edges(self):
        quad = square()
        assert quad.hit(Ray(Point3(0, 0, 5), Vector3(1.5, 0, -5)), FORWARD) is None
        assert quad.hit(Ray(Point3(1.5, 0, 5), Vector3(0, 0, -1)), FORWARD) is None

    def test_parallel_ray(self):
        assert square().hit(Ray(Point3(0, 0, 1), Vector3(1, 0, 0)), FORWARD) is None

    def test_flat_bounding_box_is_padded(self):
        bbox = square().bounding_box()
        assert bbox.z.size() > 0
        assert bbox.x.min == -1 and bbox.x.max == 1

    def test_area_light_density(self):
        quad = square()
        origin = Point3(0, 0, 5)
        # distance² / (cos * area)
        assert quad.pdf_value(origin, Vector3(0, 0, -1)) == pytest.approx(25 / 4)
        assert quad.pdf_value(origin, Vector3(0, 0, 1)) == 0.0

    def test_random_points_on_quad(self, rng):
        quad = square()
        origin = Point3(0, 0, 5)
        for _ in range(100):
            p = origin + quad.random(origin, rng)
            assert p.z == pytest.approx(0.0)
            assert -1 <= p.x <= 1 and -1 <= p.y <= 1

    def test_degenerate_quad_never_hit(self):
        line = Quad(Point3(0, 0, 0), Vector3(1, 0, 0), Vector3(2, 0, 0), None)
        assert line.hit(Ray(Point3(0.5, 0, 1), Vector3(0, 0, -1)), FORWARD) is None
        assert line.pdf_value(Point3(0.5, 0, 1), Vector3(0, 0, -1)) == 0.0


class TestTriangle:
    """Tests for Triangle."""

    def make(self, uvs=None):
        return Triangle(Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0), None, uvs)

    def test_hit_inside(self):
        rec = self.make().hit(Ray(Point3(0.25, 0.25, 1), Vector3(0, 0, -1)), FORWARD)
        assert rec.t == pytest.approx(1.0)
        assert (rec.u, rec.v) == pytest.approx((0.25, 0.25))

    def test_miss_beyond_hypotenuse(self):
        assert self.make().hit(Ray(Point3(0.75, 0.75, 1), Vector3(0, 0, -1)), FORWARD) is None

    def test_area_is_half_parallelogram(self):
        assert self.make().area == pytest.approx(0.5)

    def test_uv_interpolation(self):
        tri = self.make(uvs=((0.5, 0.5), (1.0, 0.5), (0.5, 1.0)))
        rec = tri.hit(Ray(Point3(0.25, 0.25, 1), Vector3(0, 0, -1)), FORWARD)
        assert (rec.u, rec.v) == pytest.approx((0.625, 0.625))

    def test_bounding_box_covers_vertices(self):
        bbox = self.make().bounding_box()
        assert bbox.x.min == pytest.approx(0.0, abs=1e-3)
        assert bbox.x.max == pytest.approx(1.0, abs=1e-3)
        assert bbox.y.max == pytest.approx(1.0, abs=1e-3)

    def test_random_points_inside(self, rng):
        tri = self.make()
        origin = Point3(0, 0, 1)
        for _ in range(200):
            p = origin + tri.random(origin, rng)
            assert p.x >= 0 and p.y >= 0
            assert p.x + p.y <= 1 + 1e-12


class TestBox:
    """Tests for the six-sided box helper."""

    def test_hit_from_outside(self, gray):
        cube = box(Point3(0, 0, 0), Point3(1, 1, 1), gray)
        rec = cube.hit(Ray(Point3(0.5, 0.5, 5), Vector3(0, 0, -1)), FORWARD)
        assert rec.t == pytest.approx(4.0)
        assert rec.front_face

    def test_hit_from_inside(self, gray):
        cube = box(Point3(1, 1, 1), Point3(0, 0, 0), gray)
        rec = cube.hit(Ray(Point3(0.5, 0.5, 0.5), Vector3(0, 0, -1)), FORWARD)
        assert rec.t == pytest.approx(0.5)
        assert not rec.front_face


class TestTransforms:
    """Tests for Translate and RotateY instances."""

    def test_translate(self, gray):
        moved = Translate(Sphere(Point3(0, 0, 0), 1.0, gray), Vector3(0, 0, -3))
        rec = moved.hit(Ray(Point3(0, 0, 5), Vector3(0, 0, -1)), FORWARD)
        assert rec.t == pytest.approx(7.0)
        assert rec.p.z == pytest.approx(-2.0)
        assert moved.bounding_box().z.min == pytest.approx(-4.0)
        assert moved.bounding_box().z.max == pytest.approx(-2.0)

    def test_rotate_bounding_box(self, gray):
        rotated = RotateY(box(Point3(0, 0, 0), Point3(1, 1, 2), gray), 90)
        bbox = rotated.bounding_box()
        assert bbox.x.min == pytest.approx(0.0, abs=1e-3)
        assert bbox.x.max == pytest.approx(2.0, abs=1e-3)
        assert bbox.z.min == pytest.approx(-1.0, abs=1e-3)
        assert bbox.z.max == pytest.approx(0.0, abs=1e-3)

    def test_rotate_hit_point_and_normal_in_world_space(self, gray):
        rotated = RotateY(box(Point3(0, 0, 0), Point3(1, 1, 2), gray), 90)
        rec = rotated.hit(Ray(Point3(1, 0.5, 5), Vector3(0, 0, -1)), FORWARD)
        assert rec is not None
        assert rec.t == pytest.approx(5.0)
        assert rec.p.z == pytest.approx(0.0, abs=1e-9)
        assert rec.normal.z == pytest.approx(1.0)
        assert rec.front_face

    def test_rotate_miss(self, gray):
        rotated = RotateY(box(Point3(0, 0, 0), Point3(1, 1, 2), gray), 90)
        assert rotated.hit(Ray(Point3(-1, 0.5, 5), Vector3(0, 0, -1)), FORWARD) is None


SQUARE_OBJ = """\
# unit square in the z=0 plane
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
vt 0 0
vt 1 0
vt 1 1
vt 0 1
f 1/1 2/2 3/3 4/4
"""


class TestLoadObj:
    """Tests for the OBJ mesh loader."""

    def test_quad_face_is_fan_triangulated(self, tmp_path, gray):
        path = tmp_path / "square.obj"
        path.write_text(SQUARE_OBJ)
        mesh = load_obj(path, gray)
        assert len(mesh) == 1

        down = Vector3(0, 0, -1)
        first = mesh.hit(Ray(Point3(0.75, 0.25, 1), down), FORWARD)
        second = mesh.hit(Ray(Point3(0.25, 0.75, 1), down), FORWARD)
        assert first is not None and second is not None
        assert first.material is gray
        assert (first.u, first.v) == pytest.approx((0.75, 0.25))
        assert mesh.hit(Ray(Point3(1.5, 0.5, 1), down), FORWARD) is None

    def test_scale_and_negative_indices(self, tmp_path, gray):
        path = tmp_path / "tri.obj"
        path.write_text("v 0 0 0\nv 1 0 0\nv 0 1 0\nf -3 -2 -1\n")
        mesh = load_obj(path, gray, scale=2.0)
        bbox = mesh.bounding_box()
        assert bbox.x.max == pytest.approx(2.0)
        assert bbox.y.max == pytest.approx(2.0)

    def test_malformed_line_reports_location(self, tmp_path, gray):
        path = tmp_path / "bad.obj"
        path.write_text("v 0 0 0\nv 1 zero 0\n")
        with pytest.raises(ValueError, match="bad.obj:2"):
            load_obj(path, gray)

    def test_face_with_missing_vertex(self, tmp_path, gray):
        path = tmp_path / "bad.obj"
        path.write_text("v 0 0 0\nf 1 2 3\n")
        with pytest.raises(ValueError):
            load_obj(path, gray)

    def test_missing_file(self, tmp_path, gray):
        with pytest.raises(FileNotFoundError):
            load_obj(tmp_path / "nope.obj", gray)

    def test_found_in_search_dirs(self, tmp_path, gray):
        (tmp_path / "tri.obj").write_text("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
        mesh = load_obj("tri.obj", gray, search_dirs=[tmp_path])
        assert len(mesh) == 1

    def test_missing_file_in_search_dirs(self, tmp_path, gray):
        with pytest.raises(FileNotFoundError):
            load_obj("tri.obj", gray, search_dirs=[tmp_path])


TWO_TRIANGLES_OBJ = """\
mtllib colors.mtl
v 0 0 0
v 1 0 0
v 0 1 0
v 2 0 0
v 3 0 0
v 2 1 0
f 1 2 3
usemtl red
f 4 5 6
"""

DOWN = Vector3(0, 0, -1)


def material_at(mesh, x, y):
    rec = mesh.hit(Ray(Point3(x, y, 1), DOWN), FORWARD)
    assert rec is not None
    return rec.material


class TestMaterialImport:
    """Tests for MTL libraries referenced from OBJ files."""

    def test_usemtl_applies_diffuse_color(self, tmp_path, gray):
        (tmp_path / "colors.mtl").write_text("newmtl red\nKd 1 0 0\n")
        path = tmp_path / "mesh.obj"
        path.write_text(TWO_TRIANGLES_OBJ)
        mesh = load_obj(path, gray)

        red = material_at(mesh, 2.25, 0.25)
        assert isinstance(red, Lambertian)
        assert red.texture.value(0, 0, Point3(0, 0, 0)) == Color(1, 0, 0)
        # Faces before any usemtl keep the fallback
        assert material_at(mesh, 0.25, 0.25) is gray

    def test_default_fallback_is_light_gray(self, tmp_path):
        path = tmp_path / "tri.obj"
        path.write_text("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
        material = material_at(load_obj(path), 0.25, 0.25)
        assert isinstance(material, Lambertian)
        assert material.texture.value(0, 0, Point3(0, 0, 0)) == DEFAULT_MESH_COLOR

    def test_missing_library_uses_fallback(self, tmp_path, gray, caplog):
        path = tmp_path / "mesh.obj"
        path.write_text(TWO_TRIANGLES_OBJ)
        with caplog.at_level(logging.WARNING, logger="pathtracer.geometry.mesh"):
            mesh = load_obj(path, gray)
        assert material_at(mesh, 2.25, 0.25) is gray
        assert "colors.mtl" in caplog.text

    def test_unknown_material_uses_fallback(self, tmp_path, gray):
        (tmp_path / "colors.mtl").write_text("newmtl blue\nKd 0 0 1\n")
        path = tmp_path / "mesh.obj"
        path.write_text(TWO_TRIANGLES_OBJ)
        assert material_at(load_obj(path, gray), 2.25, 0.25) is gray

    def test_specular_becomes_metal(self, tmp_path):
        path = tmp_path / "lib.mtl"
        path.write_text("newmtl gold\nKs 0.8 0.6 0.2\nNs 0.25\n\nnewmtl shiny\nKs 1 1 1\nNs 250\n")
        materials = load_mtl(path)
        assert isinstance(materials["gold"], Metal)
        assert materials["gold"].fuzz == pytest.approx(0.25)
        assert materials["gold"].texture.value(0, 0, Point3(0, 0, 0)) == Color(0.8, 0.6, 0.2)
        assert materials["shiny"].fuzz == 1.0

    def test_diffuse_map_becomes_image_texture(self, tmp_path):
        Image.new("RGB", (2, 2), (255, 255, 255)).save(tmp_path / "wood.png")
        path = tmp_path / "lib.mtl"
        path.write_text("newmtl wood\nKd 0.5 0.5 0.5\nmap_Kd -s 1 1 1 wood.png\n")
        material = load_mtl(path)["wood"]
        assert isinstance(material, Lambertian)
        assert isinstance(material.texture, ImageTexture)
        assert material.texture.image.width == 2
        assert tuple(material.texture.value(0.5, 0.5, Point3(0, 0, 0))) == pytest.approx((1, 1, 1))

    def test_unsupported_material_left_out(self, tmp_path):
        path = tmp_path / "lib.mtl"
        path.write_text("newmtl ghost\nd 0.5\nKs 1 1 1\n")
        assert load_mtl(path) == {}

    def test_malformed_library_line(self, tmp_path):
        path = tmp_path / "lib.mtl"
        path.write_text("newmtl red\nKd 1 red 0\n")
        with pytest.raises(ValueError, match="lib.mtl:2"):
            load_mtl(path)
