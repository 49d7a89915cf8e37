"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera model

Camera responsibilities:
    - Turn a look-at view description into viewport vectors
    - Transform (u, v) image coordinates to world-space rays
    - Apply sub-pixel jitter for anti-aliasing

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: top to bottom across image
"""

from .pinhole import (
    DEFAULT_FOV,
    Camera,
    PinholeCamera,
    default_camera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "DEFAULT_FOV",
    "Camera",
    "PinholeCamera",
    "default_camera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
