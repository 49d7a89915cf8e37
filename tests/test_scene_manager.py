"""Unit tests for the Scene aggregate.

Tests cover:
- Surface addition and insertion order
- Plane normal normalization
- Camera handling
- Re-uploading a scene after another one replaced it
- Serialization to a dictionary
"""

import math

import pytest


@pytest.fixture
def fresh_scene():
    """Create a fresh Scene for each test."""
    from skytrace.scene.manager import Scene

    scene = Scene()
    yield scene
    scene.clear()


class TestSurfaces:
    """Tests for surface management."""

    def test_add_sphere(self, fresh_scene):
        """Test adding a sphere records it and mirrors it to the fields."""
        from skytrace.scene.manager import SphereInfo

        info = fresh_scene.add_sphere((0, 0, 3), 1)
        assert info == SphereInfo(center=(0.0, 0.0, 3.0), radius=1.0)
        assert fresh_scene.surfaces == [info]
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.get_surface_count() == 1

    def test_add_plane_normalizes_normal(self, fresh_scene):
        """Test plane normals are stored at unit length."""
        info = fresh_scene.add_plane((0, -1, 0), (0, 3, 4))
        assert info.normal == pytest.approx((0.0, 0.6, 0.8))
        assert math.isclose(sum(c * c for c in info.normal), 1.0)
        assert fresh_scene.get_plane_count() == 1

    def test_plane_normal_is_plain_floats(self, fresh_scene):
        """Test the stored normal is a tuple of Python floats."""
        info = fresh_scene.add_plane((0, 0, 0), (-2, 0, 0))
        assert info.normal == (-1.0, 0.0, 0.0)
        assert all(type(c) is float for c in info.normal)

    def test_zero_plane_normal(self, fresh_scene):
        """Test a zero plane normal is rejected without adding the plane."""
        with pytest.raises(ValueError, match="nonzero"):
            fresh_scene.add_plane((0, 0, 0), (0, 0, 0))
        assert len(fresh_scene) == 0
        assert fresh_scene.get_plane_count() == 0

    def test_insertion_order(self, fresh_scene):
        """Test surfaces keep the order they were added in."""
        s1 = fresh_scene.add_sphere((0, 0, 3), 1)
        p1 = fresh_scene.add_plane((0, -1, 0), (0, 1, 0))
        s2 = fresh_scene.add_sphere((2, 0, 3), 0.5)

        assert fresh_scene.surfaces == [s1, p1, s2]
        assert fresh_scene.spheres == [s1, s2]
        assert fresh_scene.planes == [p1]
        assert len(fresh_scene) == 3
        assert repr(fresh_scene) == "Scene(spheres=2, planes=1)"

    def test_clear(self, fresh_scene):
        """Test clear removes every surface."""
        fresh_scene.add_sphere((0, 0, 3), 1)
        fresh_scene.add_plane((0, -1, 0), (0, 1, 0))
        fresh_scene.clear()

        assert len(fresh_scene) == 0
        assert fresh_scene.get_surface_count() == 0

    def test_capacity_methods(self, fresh_scene):
        """Test the capacity accessors report the storage limits."""
        from skytrace.scene.intersection import MAX_PLANES, MAX_SPHERES

        assert fresh_scene.get_max_spheres() == MAX_SPHERES
        assert fresh_scene.get_max_planes() == MAX_PLANES


class TestCamera:
    """Tests for camera handling."""

    def test_set_camera_from_view(self, fresh_scene):
        """Test a view description is built and remembered."""
        from skytrace.camera.pinhole import Camera, default_camera

        view = default_camera(aspect_ratio=1.0)
        camera = fresh_scene.set_camera(view)

        assert isinstance(camera, Camera)
        assert fresh_scene.camera is camera
        assert fresh_scene.view == view

    def test_set_camera_rejects_degenerate_view(self, fresh_scene):
        """Test a degenerate view raises ValueError."""
        from skytrace.camera.pinhole import PinholeCamera

        with pytest.raises(ValueError):
            fresh_scene.set_camera(PinholeCamera(eye=(0, 0, 0), look_at=(0, 0, 0)))
        assert fresh_scene.camera is None


class TestUpload:
    """Tests for re-uploading a scene."""

    def test_upload_restores_surfaces(self):
        """Test upload() makes an older scene current again."""
        from skytrace.scene.intersection import query_scene
        from skytrace.scene.manager import Scene

        first = Scene()
        first.add_sphere((0, 0, 5), 1)

        second = Scene()
        second.add_plane((0, 0, 10), (0, 0, -1))
        assert query_scene((0, 0, 0), (0, 0, 1), 1e-5).t == pytest.approx(10.0, abs=1e-4)

        first.upload()
        assert first.get_surface_count() == 1
        assert query_scene((0, 0, 0), (0, 0, 1), 1e-5).t == pytest.approx(4.0, abs=1e-5)


class TestSerialization:
    """Tests for to_dict()."""

    def test_to_dict(self, fresh_scene):
        """Test the dictionary lists surfaces in order and the camera view."""
        from skytrace.camera.pinhole import default_camera

        fresh_scene.add_sphere((0, 0, 3), 1)
        fresh_scene.add_plane((0, -1, 0), (0, 2, 0))
        fresh_scene.set_camera(default_camera(aspect_ratio=2.0))

        data = fresh_scene.to_dict()
        assert data["surfaces"] == [
            {"type": "sphere", "center": [0.0, 0.0, 3.0], "radius": 1.0},
            {"type": "plane", "point": [0.0, -1.0, 0.0], "normal": [0.0, 1.0, 0.0]},
        ]
        assert data["camera"]["eye"] == [0.0, 0.0, 0.0]
        assert data["camera"]["fov"] == 30.0
        assert data["camera"]["aspect_ratio"] == 2.0

    def test_to_dict_without_camera(self, fresh_scene):
        """Test the camera entry is None before a camera is set."""
        assert fresh_scene.to_dict() == {"surfaces": [], "camera": None}
