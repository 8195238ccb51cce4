#!/usr/bin/env python3
"""
Planet textures: procedural generation, image loading and colour helpers.

generate_texture paints in three layers, all driven by a single random source so
a seeded run is reproducible bit for bit:
1) a linear gradient from color_a (top-left corner) to color_b (bottom-right),
2) faint white speckles of random position, size and opacity,
3) dark horizontal elliptical streaks applied with a multiply blend.

generate_cloud_layer makes the optional translucent layer drawn on top of a
planet and scrolled a little faster than its surface.

Surfaces are plain pygame.Surface objects and need no display; call
convert() on them only after the video mode is set.
"""
import logging
import os
import random
from typing import Optional, Sequence, Union

import pygame

from .constants import (
    CLOUD_HAZE_OPACITY,
    CLOUD_PUFF_OPACITY,
    CLOUD_PUFFS,
    SPECKLE_MAX_OPACITY,
    STREAK_OPACITY,
    TEXTURE_SIZE,
    TEXTURE_SPECKLES,
    TEXTURE_STREAKS,
)
from .data_models import Color, require_count
from .errors import ConfigError

logger = logging.getLogger(__name__)

ColorLike = Union[str, Sequence[int], pygame.Color]


def to_color(value: ColorLike) -> pygame.Color:
    """Parse '#rrggbb', a colour name or an RGB(A) sequence into a pygame.Color."""
    try:
        if isinstance(value, str):
            return pygame.Color(value)
        return pygame.Color(*value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid color {value!r}: {exc}") from exc


def vivid_color(color: ColorLike) -> Color:
    """Boost saturation and lightness so flat-coloured planets read well from far away."""
    c = to_color(color)
    h, s, l, a = c.hsla
    s = min(100.0, s * 1.4 + 5.0)
    l = min(90.0, l * 1.1 + 2.0)
    c.hsla = (h, s, l, a)
    return (c.r, c.g, c.b)


def _paint_gradient(surface: pygame.Surface, color_a: pygame.Color, color_b: pygame.Color) -> None:
    size = surface.get_width()
    last = 2 * size - 2
    # Every pixel on the anti-diagonal x + y = d shares one gradient value.
    for d in range(last + 1):
        t = d / last if last else 0.0
        start = (min(d, size - 1), d - min(d, size - 1))
        end = (d - min(d, size - 1), min(d, size - 1))
        pygame.draw.line(surface, color_a.lerp(color_b, t), start, end)


def _paint_speckles(surface: pygame.Surface, count: int, rng: random.Random) -> None:
    size = surface.get_width()
    for _ in range(count):
        x = rng.random() * size
        y = rng.random() * size
        w = 1 + rng.random() * 6
        h = 1 + rng.random() * 6
        alpha = int(rng.random() * SPECKLE_MAX_OPACITY * 255)
        if alpha == 0:
            continue
        speck = pygame.Surface((int(w), int(h)), 0, 32)
        speck.fill((255, 255, 255))
        speck.set_alpha(alpha)
        surface.blit(speck, (int(x), int(y)))


def _paint_streaks(surface: pygame.Surface, count: int, rng: random.Random) -> None:
    size = surface.get_width()
    # Multiplying by black at opacity a is the same as scaling by (1 - a).
    keep = int(round(255 * (1.0 - STREAK_OPACITY)))
    mask = pygame.Surface((size, size), 0, 32)
    half_width = size * 0.6
    for _ in range(count):
        y = rng.random() * size
        half_height = 6 + rng.random() * 20
        mask.fill((255, 255, 255))
        rect = pygame.Rect(0, 0, int(2 * half_width), int(2 * half_height))
        rect.center = (int(size / 2), int(y))
        pygame.draw.ellipse(mask, (keep, keep, keep), rect)
        surface.blit(mask, (0, 0), special_flags=pygame.BLEND_RGB_MULT)


def generate_texture(color_a: ColorLike,
                     color_b: ColorLike,
                     size: int = TEXTURE_SIZE,
                     rng: Optional[random.Random] = None,
                     speckles: int = TEXTURE_SPECKLES,
                     streaks: int = TEXTURE_STREAKS) -> pygame.Surface:
    """
    Generate a square procedural planet texture.

    Args:
        color_a: Gradient colour at the top-left corner
        color_b: Gradient colour at the bottom-right corner
        size: Width and height in pixels (> 0)
        rng: Random source; pass a seeded random.Random for reproducible output
        speckles: Number of white speckles (>= 0)
        streaks: Number of dark streaks (>= 0)

    Returns:
        A size x size 32-bit pygame.Surface

    Raises:
        ConfigError: on a non-positive size, negative counts, non-integer
            size or counts, or unparseable colours
    """
    size = require_count("texture", "size", size, minimum=1)
    speckles = require_count("texture", "speckles", speckles)
    streaks = require_count("texture", "streaks", streaks)
    a = to_color(color_a)
    b = to_color(color_b)
    rng = rng or random.Random()

    surface = pygame.Surface((size, size), 0, 32)
    _paint_gradient(surface, a, b)
    _paint_speckles(surface, speckles, rng)
    _paint_streaks(surface, streaks, rng)
    logger.debug("generated %dx%d texture %s -> %s", size, size, tuple(a), tuple(b))
    return surface


def generate_cloud_layer(cloud_color: ColorLike,
                         haze_color: ColorLike,
                         size: int = TEXTURE_SIZE,
                         rng: Optional[random.Random] = None,
                         puffs: int = CLOUD_PUFFS) -> pygame.Surface:
    """
    Generate a translucent cloud layer to scroll over a planet texture.

    A faint haze of haze_color covers the whole map and flat elliptical puffs of
    cloud_color sit on top; coverage lives in the alpha channel. Puffs crossing
    the right edge are repeated on the left so the layer wraps horizontally.

    Raises:
        ConfigError: on a non-positive size, a negative puff count or bad colours
    """
    size = require_count("cloud layer", "size", size, minimum=1)
    puffs = require_count("cloud layer", "puffs", puffs)
    cloud = to_color(cloud_color)
    haze = to_color(haze_color)
    rng = rng or random.Random()

    surface = pygame.Surface((size, size), pygame.SRCALPHA, 32)
    surface.fill((haze.r, haze.g, haze.b, int(255 * CLOUD_HAZE_OPACITY)))
    for _ in range(puffs):
        w = size * (0.05 + rng.random() * 0.25)
        h = w * (0.15 + rng.random() * 0.2)
        rect = pygame.Rect(0, 0, max(1, int(w)), max(1, int(h)))
        rect.center = (int(rng.random() * size), int(rng.random() * size))
        alpha = int(255 * CLOUD_PUFF_OPACITY * (0.5 + rng.random() * 0.5))
        fill = (cloud.r, cloud.g, cloud.b, alpha)
        pygame.draw.ellipse(surface, fill, rect)
        if rect.right > size:
            pygame.draw.ellipse(surface, fill, rect.move(-size, 0))
    return surface


def texture_bytes(surface: pygame.Surface) -> bytes:
    """Raw RGB pixel bytes, row-major from the top-left corner."""
    return pygame.image.tobytes(surface, "RGB")


def load_texture(path: str) -> Optional[pygame.Surface]:
    """
    Load an image texture from disk.

    A missing or unreadable file is logged and yields None so callers can fall
    back to a flat colour.
    """
    if not os.path.isfile(path):
        logger.warning("texture file not found: %s", path)
        return None
    try:
        return pygame.image.load(path)
    except pygame.error as exc:
        logger.warning("could not load texture %s: %s", path, exc)
        return None
