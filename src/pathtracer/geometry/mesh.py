# geometry/mesh.py
import logging
import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pathtracer import config
from pathtracer.core.aabb import AABB
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.geometry.quad import PlanarPrimitive
from pathtracer.geometry.world import HittableList
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.material import Material
from pathtracer.materials.metal import Metal
from pathtracer.materials.textures import ImageTexture

logger = logging.getLogger(__name__)

UV = Tuple[float, float]

# Used for faces that name no material
DEFAULT_MESH_COLOR = Color(0.8, 0.8, 0.8)


class Triangle(PlanarPrimitive):
    """
    Triangle with vertices q, a, b.

    Texture coordinates default to the barycentric (alpha, beta) pair; when
    per-vertex UVs are supplied they are interpolated instead.
    """
    def __init__(self, q: Point3, a: Point3, b: Point3, material,
                 uvs: Optional[Tuple[UV, UV, UV]] = None):
        super().__init__(q, a - q, b - q, material)
        self.area *= 0.5
        self.uvs = uvs

    def _compute_bounding_box(self) -> AABB:
        return AABB.union(
            AABB.from_points(self.q, self.q + self.u),
            AABB.from_points(self.q, self.q + self.v),
        )

    def is_interior(self, alpha: float, beta: float) -> bool:
        return alpha >= 0 and beta >= 0 and alpha + beta <= 1

    def hit(self, ray, ray_t, rng=None):
        rec = super().hit(ray, ray_t, rng)
        if rec is not None and self.uvs is not None:
            rec.u, rec.v = self.interpolate_uv(rec.u, rec.v)
        return rec

    def interpolate_uv(self, alpha: float, beta: float) -> UV:
        """Interpolate UV coordinates at the given barycentric coordinates."""
        uv0, uv1, uv2 = self.uvs
        w = 1.0 - alpha - beta
        return (w * uv0[0] + alpha * uv1[0] + beta * uv2[0],
                w * uv0[1] + alpha * uv1[1] + beta * uv2[1])

    def random(self, origin: Point3, rng: random.Random) -> Vector3:
        # Fold the unit square onto the triangle for a uniform point
        a = rng.random()
        b = rng.random()
        if a + b > 1:
            a, b = 1 - a, 1 - b
        p = self.q + self.u * a + self.v * b
        return p - origin


def _resolve_index(token: str, count: int) -> int:
    # OBJ indices are 1-based; negative values count back from the end
    index = int(token)
    return index - 1 if index > 0 else count + index


def _find_file(filename: Union[str, Path], search_dirs: Iterable[Union[str, Path]]) -> Optional[Path]:
    # The name as given first, then relative to each search directory
    candidates = [Path(filename)] + [Path(d) / filename for d in search_dirs]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _parse_color(values: List[str]) -> Color:
    return Color(float(values[1]), float(values[2]), float(values[3]))


def _build_material(name: str, props: Dict[str, object], base_dir: Path) -> Optional[Material]:
    # Textured diffuse, then plain diffuse, then specular; anything else is unsupported
    if "map_Kd" in props:
        texture = ImageTexture(props["map_Kd"], search_dirs=[str(base_dir), config.IMAGE_DIR])
        return Lambertian(texture)
    if "Kd" in props:
        return Lambertian(props["Kd"])
    if "Ks" in props and "Ns" in props:
        return Metal(props["Ks"], props["Ns"])
    logger.warning("Unsupported material %r; using the fallback material", name)
    return None


def load_mtl(filename: Union[str, Path]) -> Dict[str, Material]:
    """
    Read a Wavefront MTL library.

    Only the diffuse color (`Kd`), diffuse map (`map_Kd`) and specular color
    with exponent (`Ks` + `Ns`) are understood. A `map_Kd` image is looked up
    next to the MTL file, then in IMAGE_DIR. `Ns` is used as the metal fuzz
    and clamped to [0, 1]. Materials with none of these are left out.

    Raises:
        FileNotFoundError: If the MTL file doesn't exist
        ValueError: If a line cannot be parsed
    """
    path = Path(filename)
    base_dir = path.parent
    definitions: Dict[str, Dict[str, object]] = {}
    current: Optional[Dict[str, object]] = None

    with open(path, "r") as f:
        for line_num, line in enumerate(f, 1):
            values = line.split()
            if not values or values[0].startswith("#"):
                continue

            try:
                if values[0] == "newmtl":
                    current = definitions.setdefault(" ".join(values[1:]), {})
                elif current is None:
                    continue
                elif values[0] in ("Kd", "Ks"):
                    current[values[0]] = _parse_color(values)
                elif values[0] == "Ns":
                    current["Ns"] = float(values[1])
                elif values[0] == "map_Kd":
                    # Options such as -s or -o come before the file name
                    current["map_Kd"] = values[-1]
            except (ValueError, IndexError) as e:
                raise ValueError(f"{path}:{line_num}: cannot parse {line.strip()!r}: {e}") from e

    materials = {}
    for name, props in definitions.items():
        material = _build_material(name, props, base_dir)
        if material is not None:
            materials[name] = material
    logger.debug("Loaded %d of %d materials from %s", len(materials), len(definitions), path)
    return materials


def load_obj(filename: Union[str, Path], material: Optional[Material] = None,
             scale: float = 1.0,
             search_dirs: Optional[Iterable[Union[str, Path]]] = None) -> HittableList:
    """
    Load a triangle mesh from an OBJ file.

    The file is looked up as given, then inside each of `search_dirs`
    (defaults to the OBJECT_DIR setting). Material libraries named by
    `mtllib` are read relative to the OBJ file and applied per `usemtl`
    group. `material` is used for faces without a usable material; it
    defaults to a light gray Lambertian. A missing library only logs a
    warning.

    Polygonal faces are fan-triangulated (assumed convex). Vertex positions
    are multiplied by `scale`.

    Returns:
        HittableList holding a single BVH over the triangles.

    Raises:
        FileNotFoundError: If the OBJ file doesn't exist
        ValueError: If a line cannot be parsed
    """
    if search_dirs is None:
        search_dirs = [config.OBJECT_DIR]
    path = _find_file(filename, search_dirs)
    if path is None:
        raise FileNotFoundError(f"OBJ file not found: {filename}")

    fallback = material if material is not None else Lambertian(DEFAULT_MESH_COLOR)
    current = fallback
    materials: Dict[str, Material] = {}
    vertices: List[Point3] = []
    uvs: List[UV] = []
    triangles = HittableList()

    logger.debug("Opening OBJ file: %s", path)
    with open(path, "r") as f:
        for line_num, line in enumerate(f, 1):
            values = line.split()
            if not values or values[0].startswith("#"):
                continue

            try:
                if values[0] == "v":
                    vertices.append(Point3(float(values[1]) * scale,
                                           float(values[2]) * scale,
                                           float(values[3]) * scale))
                elif values[0] == "vt":
                    uvs.append((float(values[1]), float(values[2]) if len(values) > 2 else 0.0))
                elif values[0] == "f":
                    corners = []
                    for vertex_str in values[1:]:
                        indices = vertex_str.split("/")
                        v_idx = _resolve_index(indices[0], len(vertices))
                        t_idx = (_resolve_index(indices[1], len(uvs))
                                 if len(indices) > 1 and indices[1] else None)
                        corners.append((vertices[v_idx], uvs[t_idx] if t_idx is not None else None))

                    for i in range(1, len(corners) - 1):
                        (p0, uv0), (p1, uv1), (p2, uv2) = corners[0], corners[i], corners[i + 1]
                        face_uvs = (uv0, uv1, uv2) if None not in (uv0, uv1, uv2) else None
                        triangles.add(Triangle(p0, p1, p2, current, face_uvs))
                elif values[0] == "mtllib":
                    for name in values[1:]:
                        mtl_path = path.parent / name
                        if mtl_path.is_file():
                            materials.update(load_mtl(mtl_path))
                        else:
                            logger.warning("Material library %s not found; using the fallback material",
                                           mtl_path)
                elif values[0] == "usemtl":
                    name = " ".join(values[1:])
                    current = materials.get(name, fallback)
                    if name not in materials:
                        logger.warning("%s:%d: unknown material %r", path, line_num, name)
            except (ValueError, IndexError) as e:
                raise ValueError(f"{path}:{line_num}: cannot parse {line.strip()!r}: {e}") from e

    logger.info("Imported %s: %d triangles, %d materials", path.name, len(triangles), len(materials))
    logger.debug("Loaded %d vertices, %d UVs from %s", len(vertices), len(uvs), path)
    return triangles.build_bvh()
