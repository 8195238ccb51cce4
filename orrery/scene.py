#!/usr/bin/env python3
"""
Scene aggregate: everything the renderer draws and the integrator advances.

A Scene is built once from a SceneConfig and then only mutated by tick(). It
owns the bodies, the sun, the starfield and the per-body textures, so there is
no module-level scene state anywhere in the package.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pygame

from .constants import (
    AU,
    BOB_AMPLITUDE,
    SIZE_SCALE,
    STAR_COUNT,
    STARFIELD_SPIN,
    SUN_COLOR,
    SUN_GLOW_COLOR,
    SUN_GLOW_OPACITY,
    SUN_GLOW_SCALE,
    SUN_RADIUS_REL,
    SUN_SCALE_FACTOR,
    TEXTURE_SIZE,
)
from .data_models import Body, BodyConfig, SceneConfig, StarSample, Sun, TextureSpec
from .errors import ConfigError
from .orbits import advance, random_angle
from .starfield import sample_starfield
from .textures import generate_cloud_layer, generate_texture, load_texture, vivid_color

logger = logging.getLogger(__name__)


def default_sun() -> Sun:
    return Sun(
        size=SUN_RADIUS_REL * SIZE_SCALE * SUN_SCALE_FACTOR,
        color=SUN_COLOR,
        glow_scale=SUN_GLOW_SCALE,
        glow_color=SUN_GLOW_COLOR,
        glow_opacity=SUN_GLOW_OPACITY,
    )


@dataclass
class Scene:
    """
    Owned scene state.

    Attributes:
        name: Display name of the template the scene was built from.
        bodies: Orbiting bodies, in template order.
        sun: The central star at the origin.
        stars: Background star samples (fixed positions; spun as a whole).
        textures: Surfaces keyed by body name; bodies without one draw flat.
        overlays: Translucent cloud layers keyed by body name.
        star_rotation: Accumulated starfield spin about the y axis.
        ticks: Total ticks advanced since the scene was built.
    """
    name: str
    bodies: List[Body]
    sun: Sun
    stars: List[StarSample] = field(default_factory=list)
    textures: Dict[str, pygame.Surface] = field(default_factory=dict)
    overlays: Dict[str, pygame.Surface] = field(default_factory=dict)
    star_rotation: float = 0.0
    ticks: float = 0.0
    bob_amplitude: float = BOB_AMPLITUDE

    def tick(self, dt_ticks: float = 1) -> None:
        """Advance all bodies and spin the starfield."""
        advance(self.bodies, dt_ticks, self.bob_amplitude)
        self.star_rotation += STARFIELD_SPIN * dt_ticks
        self.ticks += dt_ticks

    def get_body(self, name: str) -> Optional[Body]:
        for b in self.bodies:
            if b.name == name:
                return b
        return None


def spawn_body(config: BodyConfig, rng: Optional[random.Random] = None) -> Body:
    """
    Create a Body from its template row.

    The orbital angle is drawn uniformly from [0, 2π); Body derives its
    position from it, so a freshly spawned body is already consistent.
    """
    return Body(
        name=config.name,
        orbit_radius=config.au * AU,
        orbit_speed=config.orbit_speed,
        rotation_speed=config.rotation_speed,
        size=config.radius_rel * SIZE_SCALE,
        color=vivid_color(config.color),
        angle=random_angle(rng),
        axial_tilt=config.axial_tilt,
        ring=config.ring,
        atmosphere=config.atmosphere,
    )


def _build_surface(spec: TextureSpec, generator, size: int, rng: random.Random) -> Optional[pygame.Surface]:
    if spec.colors is not None:
        return generator(spec.colors[0], spec.colors[1], size, rng)
    if spec.file is not None:
        return load_texture(spec.file)
    return None


def build_scene(config: SceneConfig,
                rng: Optional[random.Random] = None,
                star_count: Optional[int] = None,
                texture_size: int = TEXTURE_SIZE) -> Scene:
    """
    Build a Scene from a SceneConfig.

    Args:
        config: Template to instantiate
        rng: Random source for initial angles, textures and stars
        star_count: Overrides the template's star count when given
        texture_size: Edge length of procedural textures in pixels

    Raises:
        ConfigError: on duplicate body names or invalid star/texture settings
    """
    rng = rng or random.Random()
    names = [b.name for b in config.bodies]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"{config.name}: duplicate body names {duplicates}")

    bodies = [spawn_body(b, rng) for b in config.bodies]

    textures: Dict[str, pygame.Surface] = {}
    overlays: Dict[str, pygame.Surface] = {}
    for b in config.bodies:
        if b.texture is not None:
            surface = _build_surface(b.texture, generate_texture, texture_size, rng)
            if surface is not None:
                textures[b.name] = surface
        if b.clouds is not None:
            surface = _build_surface(b.clouds, generate_cloud_layer, texture_size, rng)
            if surface is not None:
                overlays[b.name] = surface

    if star_count is None:
        star_count = config.star_count if config.star_count is not None else STAR_COUNT
    stars = sample_starfield(star_count, rng=rng)

    logger.info("built scene '%s': %d bodies, %d textures, %d cloud layers, %d stars",
                config.name, len(bodies), len(textures), len(overlays), len(stars))
    return Scene(name=config.name, bodies=bodies, sun=default_sun(), stars=stars,
                 textures=textures, overlays=overlays)
