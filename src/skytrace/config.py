"""Render settings and Taichi backend initialization.

RenderSettings collects the parameters a render needs besides the scene
itself. Its defaults match the command line defaults.

The Taichi runtime must be initialized before any module declaring Taichi
fields is imported (camera, scene, integrator). init_backend() does this and
is also where the random seed for all sampling is chosen.

Example:
    >>> from skytrace.config import RenderSettings, init_backend
    >>> settings = RenderSettings(width=320, height=180, samples=16, seed=7)
    >>> settings.validate()
    >>> init_backend(settings.arch, settings.seed)
"""

from dataclasses import dataclass
from typing import Literal

import taichi as ti
from loguru import logger

# Mirrors the render target limits in skytrace.core.integrator, which cannot
# be imported before the backend is initialized
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

Arch = Literal["cpu", "gpu", "cuda", "vulkan", "metal"]


@dataclass
class RenderSettings:
    """Parameters of one render.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        samples: Samples per pixel.
        bounces: Bounce budget per path. A path that is still bouncing when
            the budget runs out contributes black.
        fov: Vertical field of view override in degrees, or None.
        focal_length: Focal length override, or None.
        aperture: Lens aperture radius. Accepted for compatibility; depth of
            field is not simulated.
        seed: Seed for Taichi's random number generators.
        arch: Taichi backend to run on.
        batch_size: Samples rendered between progress updates.
    """

    width: int = 640
    height: int = 360
    samples: int = 30
    bounces: int = 2
    fov: float | None = None
    focal_length: float | None = None
    aperture: float = 0.0
    seed: int = 0
    arch: Arch = "cpu"
    batch_size: int = 1

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check that every setting is usable.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        for name in ("width", "height", "samples", "bounces", "batch_size"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.fov is not None and not 0.0 < self.fov < 180.0:
            raise ValueError(f"fov must be between 0 and 180 degrees, got {self.fov}")
        if self.focal_length is not None and self.focal_length <= 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must not be negative, got {self.aperture}")


def init_backend(arch: Arch = "cpu", seed: int = 0) -> None:
    """Initialize the Taichi runtime.

    Args:
        arch: Backend name. "gpu" lets Taichi pick any available GPU backend
            and falls back to the CPU when none is found.
        seed: Seed for the per-thread random number generators used by all
            sampling in kernels.
    """
    ti.init(arch=getattr(ti, arch), random_seed=seed)
    logger.debug("Taichi initialized with arch={} seed={}", arch, seed)
