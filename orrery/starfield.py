#!/usr/bin/env python3
"""
Starfield sampler: background stars scattered on a thick spherical shell.

Directions are drawn uniformly over the unit sphere by inverse-CDF sampling
(theta = 2πu, phi = acos(2v - 1)); sampling phi uniformly instead would bunch
stars at the poles.
"""
import math
import random
from typing import List, Optional

import pygame

from .constants import (
    STAR_COUNT,
    STAR_HUE,
    STAR_LIGHTNESS_RANGE,
    STAR_MAX_RADIUS,
    STAR_MIN_LIGHTNESS,
    STAR_MIN_RADIUS,
    STAR_SATURATION,
)
from .data_models import Color, StarSample, require_count
from .errors import ConfigError
from .vector_utils import Vec3


def _check_band(min_radius: float, max_radius: float) -> None:
    if not (math.isfinite(min_radius) and math.isfinite(max_radius)):
        raise ConfigError("star radius band must be finite")
    if min_radius < 0 or max_radius < 0:
        raise ConfigError(f"star radius band must be non-negative, got [{min_radius}, {max_radius}]")
    if min_radius > max_radius:
        raise ConfigError(f"star radius band is inverted: [{min_radius}, {max_radius}]")


def random_sphere_point(rng: Optional[random.Random] = None,
                        min_radius: float = STAR_MIN_RADIUS,
                        max_radius: float = STAR_MAX_RADIUS) -> Vec3:
    """Random point with radius uniform in [min_radius, max_radius] and uniform direction."""
    rng = rng or random
    radius = rng.random() * (max_radius - min_radius) + min_radius
    u = rng.random()
    v = rng.random()
    theta = 2.0 * math.pi * u
    phi = math.acos(2.0 * v - 1.0)
    return (
        radius * math.sin(phi) * math.cos(theta),
        radius * math.sin(phi) * math.sin(theta),
        radius * math.cos(phi),
    )


def hsl_color(hue: float, saturation: float, lightness: float) -> Color:
    """Convert HSL (each 0..1) to an RGB tuple in 0..255."""
    c = pygame.Color(0, 0, 0)
    c.hsla = (hue * 360.0 % 360.0, saturation * 100.0, lightness * 100.0, 100.0)
    return (c.r, c.g, c.b)


def sample_starfield(count: int = STAR_COUNT,
                     min_radius: float = STAR_MIN_RADIUS,
                     max_radius: float = STAR_MAX_RADIUS,
                     hue: float = STAR_HUE,
                     saturation: float = STAR_SATURATION,
                     rng: Optional[random.Random] = None) -> List[StarSample]:
    """
    Generate count background stars.

    Each star gets a position from random_sphere_point and a color of the fixed
    hue/saturation with lightness uniform in [0.1, 0.9).

    Raises:
        ConfigError: on a negative or non-integer count or an invalid radius band
    """
    count = require_count("starfield", "star count", count)
    _check_band(min_radius, max_radius)
    if not (0.0 <= saturation <= 1.0):
        raise ConfigError(f"star saturation must be within [0, 1], got {saturation!r}")
    rng = rng or random.Random()
    stars: List[StarSample] = []
    for _ in range(count):
        pos = random_sphere_point(rng, min_radius, max_radius)
        lightness = rng.random() * STAR_LIGHTNESS_RANGE + STAR_MIN_LIGHTNESS
        stars.append(StarSample(position=pos, color=hsl_color(hue, saturation, lightness)))
    return stars
