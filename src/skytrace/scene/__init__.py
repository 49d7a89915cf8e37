"""Scene module for surface storage, nearest-hit queries and scene loading.

Components:
    intersection: Surface storage in Taichi fields and the nearest-hit query
    manager: Scene aggregate owning the surface list and camera
    parser: Reader for the line-oriented scene description format

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for sphere and plane data
    - A surface table of (kind, slot) pairs in insertion order
"""

from .intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    HitResult,
    SurfaceKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    get_surface_count,
    intersect_scene,
    query_scene,
)
from .manager import PlaneInfo, Scene, SphereInfo, SurfaceInfo
from .parser import (
    Record,
    SceneParseError,
    load_scene,
    load_scene_file,
    parse_line,
    parse_records,
)

__all__ = [
    # Intersection module
    "SurfaceKind",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "get_surface_count",
    "intersect_scene",
    "HitResult",
    "query_scene",
    "MAX_SPHERES",
    "MAX_PLANES",
    # Manager module
    "Scene",
    "SphereInfo",
    "PlaneInfo",
    "SurfaceInfo",
    # Parser module
    "Record",
    "SceneParseError",
    "load_scene",
    "load_scene_file",
    "parse_line",
    "parse_records",
]
