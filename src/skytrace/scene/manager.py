"""Scene aggregate coordinating surfaces and the camera.

This module provides the Python-side Scene that owns the ordered surface list
and the camera. Adding a surface records it locally and mirrors it into the
Taichi fields read by intersect_scene(), so the Scene and the GPU-side
storage always agree.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.pinhole import default_camera
    >>> from skytrace.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere(center=(0, 0, 3), radius=1.0)
    >>> scene.add_plane(point=(0, -1, 0), normal=(0, 1, 0))
    >>> scene.set_camera(default_camera(aspect_ratio=16 / 9))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from skytrace.camera.pinhole import Camera, PinholeCamera, setup_camera
from skytrace.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    get_surface_count,
)


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere.
    """

    center: tuple[float, float, float]
    radius: float


@dataclass(frozen=True)
class PlaneInfo:
    """A plane in the scene.

    Attributes:
        point: A point on the plane.
        normal: The unit plane normal.
    """

    point: tuple[float, float, float]
    normal: tuple[float, float, float]


SurfaceInfo = Union[SphereInfo, PlaneInfo]


def _normalized(v: tuple[float, float, float]) -> tuple[float, float, float]:
    n = np.asarray(v, dtype=np.float64)
    length = np.linalg.norm(n)
    if length == 0.0:
        raise ValueError("Plane normal must be nonzero")
    return tuple(float(c) for c in n / length)


class Scene:
    """Ordered collection of surfaces plus the camera that views them.

    The Scene is built once (usually by the scene parser) and is read-only
    while rendering. Only one Scene can be current on the GPU at a time: a
    new Scene clears the shared surface storage, and upload() makes an
    existing Scene current again.

    Attributes:
        surfaces: SphereInfo and PlaneInfo records in insertion order.
        camera: The camera geometry, or None until set_camera() is called.
        view: The view description the camera was built from, if any.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.surfaces: list[SurfaceInfo] = []
        self.camera: Camera | None = None
        self.view: PinholeCamera | None = None
        clear_scene()

    def clear(self) -> None:
        """Remove all surfaces (the camera is kept)."""
        clear_scene()
        self.surfaces.clear()

    # =========================================================================
    # Surface Management
    # =========================================================================

    def add_sphere(self, center: tuple[float, float, float], radius: float) -> SphereInfo:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.

        Returns:
            The recorded sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        info = SphereInfo(center=tuple(float(c) for c in center), radius=float(radius))
        add_sphere(info.center, info.radius)
        self.surfaces.append(info)
        return info

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
    ) -> PlaneInfo:
        """Add a plane to the scene.

        The normal is normalized before it is stored.

        Args:
            point: A point on the plane as (x, y, z).
            normal: The plane normal as (x, y, z), any nonzero length.

        Returns:
            The recorded plane.

        Raises:
            ValueError: If the normal is the zero vector.
            RuntimeError: If the maximum number of planes is exceeded.
        """
        info = PlaneInfo(
            point=tuple(float(c) for c in point),
            normal=_normalized(tuple(float(c) for c in normal)),
        )
        add_plane(info.point, info.normal)
        self.surfaces.append(info)
        return info

    def set_camera(self, camera: Camera | PinholeCamera) -> Camera:
        """Set and upload the scene camera.

        Args:
            camera: Camera geometry, or a view description to build it from.

        Returns:
            The camera geometry.

        Raises:
            ValueError: If a view description is degenerate.
        """
        if isinstance(camera, PinholeCamera):
            self.view = camera
        self.camera = setup_camera(camera)
        return self.camera

    def upload(self) -> None:
        """Mirror this scene into the Taichi fields again.

        Needed only when another Scene was created after this one.
        """
        clear_scene()
        for surface in self.surfaces:
            if isinstance(surface, SphereInfo):
                add_sphere(surface.center, surface.radius)
            else:
                add_plane(surface.point, surface.normal)
        if self.camera is not None:
            setup_camera(self.camera)

    # =========================================================================
    # Scene Queries
    # =========================================================================

    @property
    def spheres(self) -> list[SphereInfo]:
        """Spheres in insertion order."""
        return [s for s in self.surfaces if isinstance(s, SphereInfo)]

    @property
    def planes(self) -> list[PlaneInfo]:
        """Planes in insertion order."""
        return [s for s in self.surfaces if isinstance(s, PlaneInfo)]

    def get_sphere_count(self) -> int:
        """Get the number of spheres stored on the GPU side."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes stored on the GPU side."""
        return get_plane_count()

    def get_surface_count(self) -> int:
        """Get the total number of surfaces stored on the GPU side."""
        return get_surface_count()

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary with "surfaces" in insertion order and the camera
            view description (or None).
        """
        surfaces: list[dict[str, Any]] = []
        for surface in self.surfaces:
            if isinstance(surface, SphereInfo):
                surfaces.append(
                    {"type": "sphere", "center": list(surface.center), "radius": surface.radius}
                )
            else:
                surfaces.append(
                    {"type": "plane", "point": list(surface.point), "normal": list(surface.normal)}
                )

        camera = None
        if self.view is not None:
            camera = {
                "eye": list(self.view.eye),
                "look_at": list(self.view.look_at),
                "up": list(self.view.up),
                "fov": self.view.fov,
                "aspect_ratio": self.view.aspect_ratio,
                "focal_length": self.view.focal_length,
            }
        return {"surfaces": surfaces, "camera": camera}

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    def __len__(self) -> int:
        return len(self.surfaces)

    def __repr__(self) -> str:
        return f"Scene(spheres={len(self.spheres)}, planes={len(self.planes)})"
