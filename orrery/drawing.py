#!/usr/bin/env python3
"""
Software rendering of a Scene onto a pygame surface.

Everything is drawn back to front (painter's algorithm): starfield, orbit rings,
then the sun and the bodies sorted by depth. Bodies are shaded disks: the
texture, scrolled horizontally by the spin angle, is clipped to a circle and a
shadow is laid over the side facing away from the sun. An optional cloud layer
scrolls over the texture slightly faster than the ground, and bodies with an
atmosphere get a faint rim behind the disk.

Each texture is doubled side by side once and cached, so scrolling a frame is a
subsurface and a scale rather than a fresh copy of the map.

Off-screen or degenerate primitives are skipped rather than drawn.
"""
import math
from typing import Dict, List, Optional, Sequence, Tuple

import pygame
from pygame import gfxdraw

from .camera import Camera3D, View
from .constants import (
    AMBIENT_LIGHT,
    ATMOSPHERE_OPACITY,
    ATMOSPHERE_SCALE,
    BACKGROUND_COLOR,
    CLOUD_OPACITY,
    CLOUD_SPIN_RATIO,
    LABEL_COLOR,
    MAX_TEXTURED_DISK,
    ORBIT_COLOR,
    ORBIT_OPACITY,
    ORBIT_SEGMENTS,
    SAFE_COORD_LIMIT,
    SELECTION_COLOR,
)
from .data_models import Body, Color, Sun
from .orbits import orbit_ring_points
from .scene import Scene
from .vector_utils import rotate_z, vec_add, vec_dot, vec_norm, vec_scale

STAR_SIZE = 0.6  # scene units; stars shrink with distance
RING_BANDS = 6
RING_SEGMENTS = 64
STRIP_CACHE_LIMIT = 64

_cached_font = None
# id(texture) -> (texture, doubled strip); the texture is kept so ids are not reused
_strip_cache: Dict[int, Tuple[pygame.Surface, pygame.Surface]] = {}


def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except (pygame.error, OSError):
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


def blend(color: Color, background: Color, opacity: float) -> Color:
    """Colour of color drawn at opacity over an opaque background."""
    return tuple(int(round(b + (c - b) * opacity)) for c, b in zip(color, background))


def draw_starfield(surf: pygame.Surface, camera: Camera3D, scene: Scene, view: View) -> int:
    """Draw the stars spun by scene.star_rotation; returns how many were visible."""
    eye, right, up, forward = view
    ex, ey, ez = eye
    c, s = math.cos(scene.star_rotation), math.sin(scene.star_rotation)
    f = camera.focal_length
    half_w, half_h = camera.viewport_size[0] / 2, camera.viewport_size[1] / 2
    w, h = camera.viewport_size
    drawn = 0
    # Spin about y and project inline; this loop runs for every star every frame.
    for star in scene.stars:
        px, py, pz = star.position
        rx = px * c + pz * s - ex
        ry = py - ey
        rz = -px * s + pz * c - ez
        depth = rx * forward[0] + ry * forward[1] + rz * forward[2]
        if depth < camera.near:
            continue
        k = f / depth
        sx = int(half_w + (rx * right[0] + ry * right[1] + rz * right[2]) * k)
        sy = int(half_h - (rx * up[0] + ry * up[1] + rz * up[2]) * k)
        if not (0 <= sx < w and 0 <= sy < h):
            continue
        radius = STAR_SIZE * k * 0.5
        if radius < 1.0:
            surf.set_at((sx, sy), star.color)
        else:
            pygame.draw.circle(surf, star.color, (sx, sy), int(radius))
        drawn += 1
    return drawn


def _visible_runs(points: Sequence[Optional[Tuple[int, int]]]) -> List[List[Tuple[int, int]]]:
    """Split a closed loop of projected points into runs with no missing points."""
    if all(p is not None for p in points):
        return [list(points) + [points[0]]]
    n = len(points)
    start = next((i for i, p in enumerate(points) if p is None), 0)
    runs: List[List[Tuple[int, int]]] = []
    current: List[Tuple[int, int]] = []
    for k in range(1, n + 1):
        p = points[(start + k) % n]
        if p is None:
            if len(current) > 1:
                runs.append(current)
            current = []
        else:
            current.append(p)
    if len(current) > 1:
        runs.append(current)
    return runs


def draw_orbit(surf: pygame.Surface, camera: Camera3D, body: Body, view: View,
               segments: int = ORBIT_SEGMENTS) -> None:
    if body.orbit_radius <= 0:
        return
    color = blend(ORBIT_COLOR, BACKGROUND_COLOR, ORBIT_OPACITY)
    projected = []
    for p in orbit_ring_points(body.orbit_radius, segments):
        sp = camera.project(p, view)
        projected.append(_safe_point(sp) if sp else None)
    for run in _visible_runs(projected):
        pygame.draw.aalines(surf, color, False, run)


def _overlay_too_big(surf: pygame.Surface, radius: float) -> bool:
    """True when a per-disk overlay would dwarf the viewport (camera almost inside the body)."""
    return radius > 2 * max(surf.get_size())


def _glow(surf: pygame.Surface, center: Tuple[int, int], radius: int, color: Color, opacity: float) -> None:
    if radius < 1 or _overlay_too_big(surf, radius):
        return
    halo = pygame.Surface((radius * 2 + 1, radius * 2 + 1), pygame.SRCALPHA)
    pygame.draw.circle(halo, (*color, int(255 * opacity)), (radius, radius), radius)
    surf.blit(halo, (center[0] - radius, center[1] - radius))


def draw_sun(surf: pygame.Surface, camera: Camera3D, sun: Sun, view: View) -> None:
    sp = camera.project((0.0, 0.0, 0.0), view)
    if sp is None:
        return
    center = _safe_point(sp)
    if center is None:
        return
    r = camera.projected_radius(sun.size, sp[2])
    _glow(surf, center, int(r * sun.glow_scale), sun.glow_color, sun.glow_opacity)
    radius = int(min(max(2.0, r), SAFE_COORD_LIMIT))
    gfxdraw.filled_circle(surf, center[0], center[1], radius, sun.color)
    gfxdraw.aacircle(surf, center[0], center[1], radius, sun.color)


def light_offset(body: Body, view: View, radius: float) -> Tuple[float, float]:
    """
    Screen-space offset of the lit circle used to cut the shadow.

    The sun sits at the origin. Lit from the viewer's side the offset is zero
    (no shadow); lit from behind it reaches 2 * radius (all shadow).
    """
    _, right, up, forward = view
    to_sun = vec_norm(vec_scale(body.position, -1.0))
    if to_sun == (0.0, 0.0, 0.0):
        return (0.0, 0.0)
    lx = vec_dot(to_sun, right)
    ly = -vec_dot(to_sun, up)
    lz = vec_dot(to_sun, forward)
    reach = radius * (1.0 + lz)
    planar = math.hypot(lx, ly)
    if planar < 1e-9:
        return (0.0, 0.0) if lz <= 0 else (2.0 * radius + 2.0, 0.0)
    return (lx / planar * reach, ly / planar * reach)


def _wrapped_strip(texture: pygame.Surface) -> pygame.Surface:
    """The texture twice side by side, built once per texture surface."""
    entry = _strip_cache.get(id(texture))
    if entry is not None and entry[0] is texture:
        return entry[1]
    if len(_strip_cache) >= STRIP_CACHE_LIMIT:
        _strip_cache.clear()
    tw, th = texture.get_size()
    strip = pygame.Surface((tw * 2, th), texture.get_flags() & pygame.SRCALPHA, 32)
    # MAX against the zeroed strip copies pixels and alpha unchanged.
    strip.blit(texture, (0, 0), special_flags=pygame.BLEND_RGBA_MAX)
    strip.blit(texture, (tw, 0), special_flags=pygame.BLEND_RGBA_MAX)
    _strip_cache[id(texture)] = (texture, strip)
    return strip


def scrolled_texture(texture: pygame.Surface, angle: float, size: int) -> pygame.Surface:
    """texture scrolled horizontally by angle (one turn = full width), scaled to size x size."""
    tw, th = texture.get_size()
    shift = int((angle / (2 * math.pi)) % 1.0 * tw) % tw
    window = _wrapped_strip(texture).subsurface((shift, 0, tw, th))
    return pygame.transform.scale(window, (size, size))


def _disk_surface(body: Body, texture: Optional[pygame.Surface], radius: int,
                  offset: Tuple[float, float], overlay: Optional[pygame.Surface] = None) -> pygame.Surface:
    size = radius * 2
    disk = pygame.Surface((size, size), pygame.SRCALPHA)
    detailed = radius <= MAX_TEXTURED_DISK
    if texture is not None and detailed:
        disk.blit(scrolled_texture(texture, body.rotation, size), (0, 0))
    else:
        disk.fill((*body.color, 255))
    if overlay is not None and detailed:
        clouds = scrolled_texture(overlay, body.rotation * CLOUD_SPIN_RATIO, size)
        clouds.set_alpha(int(255 * CLOUD_OPACITY))
        disk.blit(clouds, (0, 0))

    shadow = pygame.Surface((size, size), pygame.SRCALPHA)
    pygame.draw.circle(shadow, (0, 0, 0, int(255 * (1.0 - AMBIENT_LIGHT))), (radius, radius), radius)
    pygame.draw.circle(shadow, (0, 0, 0, 0), (int(radius + offset[0]), int(radius + offset[1])), radius)
    disk.blit(shadow, (0, 0))

    mask = pygame.Surface((size, size), pygame.SRCALPHA)
    pygame.draw.circle(mask, (255, 255, 255, 255), (radius, radius), radius)
    disk.blit(mask, (0, 0), special_flags=pygame.BLEND_RGBA_MULT)
    return disk


def _ring_segments(body: Body, camera: Camera3D, view: View, front: bool, body_depth: float):
    ring = body.ring
    color = blend(ring.color, BACKGROUND_COLOR, ring.opacity)
    for band in range(RING_BANDS):
        t = band / (RING_BANDS - 1)
        r = body.size * (ring.inner + (ring.outer - ring.inner) * t)
        prev = None
        for i in range(RING_SEGMENTS + 1):
            a = (i / RING_SEGMENTS) * 2 * math.pi
            local = rotate_z((math.cos(a) * r, 0.0, math.sin(a) * r), body.axial_tilt)
            sp = camera.project(vec_add(body.position, local), view)
            if prev is not None and sp is not None:
                in_front = (prev[2] + sp[2]) / 2 < body_depth
                if in_front == front:
                    a_pt, b_pt = _safe_point(prev), _safe_point(sp)
                    if a_pt and b_pt:
                        yield color, a_pt, b_pt
            prev = sp


def draw_ring(surf: pygame.Surface, camera: Camera3D, body: Body, view: View, front: bool, body_depth: float) -> None:
    """Draw the half of a planetary ring behind (front=False) or before the body."""
    if body.ring is None:
        return
    for color, a_pt, b_pt in _ring_segments(body, camera, view, front, body_depth):
        pygame.draw.aaline(surf, color, a_pt, b_pt)


def draw_body(surf: pygame.Surface, camera: Camera3D, body: Body, texture: Optional[pygame.Surface],
              view: View, selected: bool = False, label: bool = False,
              overlay: Optional[pygame.Surface] = None) -> None:
    sp = camera.project(body.position, view)
    if sp is None:
        return
    center = _safe_point(sp)
    if center is None:
        return
    r = camera.projected_radius(body.size, sp[2])

    draw_ring(surf, camera, body, view, False, sp[2])
    if r < 2.0:
        gfxdraw.filled_circle(surf, center[0], center[1], max(1, int(r)), body.color)
    elif _overlay_too_big(surf, r):
        pygame.draw.circle(surf, body.color, center, int(min(r, SAFE_COORD_LIMIT)))
    else:
        radius = int(r)
        if body.atmosphere is not None:
            _glow(surf, center, int(r * ATMOSPHERE_SCALE) + 1, body.atmosphere, ATMOSPHERE_OPACITY)
        disk = _disk_surface(body, texture, radius, light_offset(body, view, radius), overlay)
        surf.blit(disk, (center[0] - radius, center[1] - radius))
    draw_ring(surf, camera, body, view, True, sp[2])

    if selected:
        gfxdraw.aacircle(surf, center[0], center[1], int(min(max(2.0, r), SAFE_COORD_LIMIT)) + 4, SELECTION_COLOR)
    if label:
        draw_text(surf, body.name, center[0] + max(2, int(r)) + 6, center[1] - 8, LABEL_COLOR)


def render_scene(surf: pygame.Surface, camera: Camera3D, scene: Scene,
                 show_orbits: bool = True, show_stars: bool = True, show_labels: bool = False,
                 selected_name: Optional[str] = None) -> None:
    """Draw the whole scene; the caller flips the display."""
    surf.fill(BACKGROUND_COLOR)
    view = camera.view()
    if show_stars:
        draw_starfield(surf, camera, scene, view)
    if show_orbits:
        for b in scene.bodies:
            draw_orbit(surf, camera, b, view)

    eye, _, _, forward = view
    sun_depth = vec_dot(vec_scale(eye, -1.0), forward)
    drawables = [(sun_depth, None)]
    for b in scene.bodies:
        rel = tuple(p - e for p, e in zip(b.position, eye))
        drawables.append((vec_dot(rel, forward), b))
    drawables.sort(key=lambda item: item[0], reverse=True)

    for _, b in drawables:
        if b is None:
            draw_sun(surf, camera, scene.sun, view)
        else:
            draw_body(surf, camera, b, scene.textures.get(b.name), view,
                      selected=(b.name == selected_name), label=show_labels,
                      overlay=scene.overlays.get(b.name))
