#!/usr/bin/env python3
"""
Data models for the Solar System Viewer.

This module defines the Body dataclass advanced by the orbit integrator, the
immutable StarSample produced by the starfield sampler, and the configuration
records read from scene templates.

Units and usage
- Distances and sizes are scene units; angles are radians; speeds are radians per tick.
- Body.angle is required; Body.position is derived from it on construction
  and, like angle and rotation, updated once per tick by orbits.advance.
  Everything else is fixed for the lifetime of the Body.
- Access to Body instances is coordinated by SimulationController using a lock.
- Colors are RGB tuples in 0..255.
"""
import math
import operator
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import ConfigError
from .orbits import orbit_position
from .vector_utils import Vec3

Color = Tuple[int, int, int]


def _require_finite(owner: str, field_name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ConfigError(f"{owner}: {field_name} must be a finite number, got {value!r}")


def _require_non_negative(owner: str, field_name: str, value: float) -> None:
    _require_finite(owner, field_name, value)
    if value < 0:
        raise ConfigError(f"{owner}: {field_name} must be >= 0, got {value!r}")


def require_count(owner: str, field_name: str, value, minimum: int = 0) -> int:
    """Return value as an int, rejecting floats, bools and values below minimum."""
    if isinstance(value, bool):
        raise ConfigError(f"{owner}: {field_name} must be an integer, got {value!r}")
    try:
        count = operator.index(value)
    except TypeError as exc:
        raise ConfigError(f"{owner}: {field_name} must be an integer, got {value!r}") from exc
    if count < minimum:
        raise ConfigError(f"{owner}: {field_name} must be >= {minimum}, got {count!r}")
    return count


@dataclass(frozen=True)
class RingSpec:
    """Planetary ring; inner/outer radii are multiples of the body's visual size."""
    inner: float = 1.2
    outer: float = 2.0
    color: Color = (204, 192, 168)
    opacity: float = 0.8

    def __post_init__(self):
        _require_non_negative("ring", "inner", self.inner)
        _require_non_negative("ring", "outer", self.outer)
        if self.outer < self.inner:
            raise ConfigError(f"ring: outer ({self.outer}) must be >= inner ({self.inner})")
        if not 0.0 <= self.opacity <= 1.0:
            raise ConfigError(f"ring: opacity must be within [0, 1], got {self.opacity!r}")


@dataclass(frozen=True)
class TextureSpec:
    """
    Either an image file or a pair of colors for a procedural texture.

    For a cloud layer the two colors are the cloud tint and the haze tint.
    """
    file: Optional[str] = None
    colors: Optional[Tuple[str, str]] = None


@dataclass
class Body:
    """
    Represents an orbiting body in the scene.

    Fields:
    - name: Identifier for the body
    - orbit_radius: Radius of the circular orbit around the origin
    - orbit_speed: Orbital angle advance per tick
    - rotation_speed: Spin angle advance per tick
    - size: Visual radius of the body
    - angle: Orbital angle; never wrapped, sine/cosine take care of periodicity
    - color: RGB tuple used when no texture is available
    - rotation: Spin angle about the body's own axis
    - axial_tilt: Tilt of the spin axis (and of any ring) about the z axis
    - ring: Optional planetary ring
    - atmosphere: Optional RGB tint of the thin glow around the limb
    - position: Current (x, y, z) position; not an argument, always derived from angle
    """
    name: str
    orbit_radius: float
    orbit_speed: float
    rotation_speed: float
    size: float
    angle: float
    color: Color = (200, 200, 255)
    rotation: float = 0.0
    axial_tilt: float = 0.0
    ring: Optional[RingSpec] = None
    atmosphere: Optional[Color] = None
    position: Vec3 = field(init=False)

    def __post_init__(self):
        _require_non_negative(self.name, "orbit_radius", self.orbit_radius)
        _require_finite(self.name, "orbit_speed", self.orbit_speed)
        _require_finite(self.name, "rotation_speed", self.rotation_speed)
        _require_finite(self.name, "angle", self.angle)
        _require_finite(self.name, "rotation", self.rotation)
        _require_finite(self.name, "axial_tilt", self.axial_tilt)
        _require_finite(self.name, "size", self.size)
        if self.size <= 0:
            raise ConfigError(f"{self.name}: size must be > 0, got {self.size!r}")
        self.position = orbit_position(self.angle, self.orbit_radius)


@dataclass(frozen=True)
class StarSample:
    """A background star: position on a spherical shell and its RGB color."""
    position: Vec3
    color: Color


@dataclass
class Sun:
    """The central star; also the point light of the scene."""
    size: float
    color: Color
    glow_scale: float
    glow_color: Color
    glow_opacity: float


@dataclass(frozen=True)
class BodyConfig:
    """
    One row of the per-body table in a scene template.

    radius_rel is relative to Earth (scaled by SIZE_SCALE); au is the orbit
    radius in astronomical units (scaled by AU).
    """
    name: str
    color: Color
    radius_rel: float
    au: float
    orbit_speed: float
    rotation_speed: float
    axial_tilt: float = 0.0
    texture: Optional[TextureSpec] = None
    ring: Optional[RingSpec] = None
    clouds: Optional[TextureSpec] = None
    atmosphere: Optional[Color] = None

    def __post_init__(self):
        _require_non_negative(self.name, "au", self.au)
        _require_finite(self.name, "radius_rel", self.radius_rel)
        if self.radius_rel <= 0:
            raise ConfigError(f"{self.name}: radius_rel must be > 0, got {self.radius_rel!r}")
        _require_finite(self.name, "orbit_speed", self.orbit_speed)
        _require_finite(self.name, "rotation_speed", self.rotation_speed)
        _require_finite(self.name, "axial_tilt", self.axial_tilt)


@dataclass
class SceneConfig:
    """A scene template: bodies to spawn plus optional simulation settings."""
    name: str
    bodies: List[BodyConfig] = field(default_factory=list)
    description: str = ""
    time_scale: Optional[float] = None
    star_count: Optional[int] = None
