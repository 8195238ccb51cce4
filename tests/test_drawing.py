import functools
import math
import random

import pygame
import pytest

from orrery.camera import Camera3D
from orrery.constants import BACKGROUND_COLOR
from orrery.data_models import Body, RingSpec
from orrery.drawing import (
    _strip_cache,
    _visible_runs,
    _wrapped_strip,
    blend,
    draw_orbit,
    draw_starfield,
    light_offset,
    render_scene,
    scrolled_texture,
)
from orrery.presets_loader import default_solar_system
from orrery.scene import build_scene


def make_surface(w=320, h=240):
    return pygame.Surface((w, h), 0, 32)


def make_camera(w=320, h=240, **kwargs):
    cam = Camera3D(**kwargs)
    cam.set_viewport_size(w, h)
    return cam


def non_background_pixels(surf):
    w, h = surf.get_size()
    return sum(1 for x in range(0, w, 2) for y in range(0, h, 2)
               if tuple(surf.get_at((x, y)))[:3] != BACKGROUND_COLOR)


def test_blend():
    assert blend((255, 255, 255), (0, 0, 0), 0.0) == (0, 0, 0)
    assert blend((255, 255, 255), (0, 0, 0), 1.0) == (255, 255, 255)
    assert blend((200, 100, 0), (0, 0, 0), 0.5) == (100, 50, 0)


def test_visible_runs():
    pts = [(0, 0), (1, 1), (2, 2)]
    assert _visible_runs(pts) == [[(0, 0), (1, 1), (2, 2), (0, 0)]]
    assert _visible_runs([(0, 0), None, (2, 2), (3, 3), None]) == [[(2, 2), (3, 3)]]
    assert _visible_runs([None, None]) == []
    # A run may wrap around the end of the loop.
    assert _visible_runs([(0, 0), (1, 1), None, (3, 3)]) == [[(3, 3), (0, 0), (1, 1)]]


def test_light_offset_points_toward_the_sun():
    cam = make_camera()
    body = Body(name="B", orbit_radius=10.0, orbit_speed=0.0, rotation_speed=0.0, size=1.0, angle=0.0)
    ox, oy = light_offset(body, cam.view(), 10)
    assert ox == pytest.approx(-10.0, abs=1e-6)
    assert oy == pytest.approx(0.0, abs=1e-6)


def test_light_offset_for_backlit_body_covers_disk():
    cam = make_camera(position=(0.0, 0.0, 100.0))
    body = Body(name="B", orbit_radius=20.0, orbit_speed=0.0, rotation_speed=0.0, size=1.0, angle=0.0)
    # Straight between the camera and the sun: only the night side faces us.
    body.position = (0.0, 0.0, 20.0)
    ox, oy = light_offset(body, cam.view(), 10)
    assert abs(ox) + abs(oy) >= 20.0


def test_starfield_draws_only_visible_stars():
    scene = build_scene(default_solar_system(), rng=random.Random(1), star_count=400, texture_size=8)
    surf = make_surface()
    # Inside the shell, so part of the sky is behind the camera.
    cam = make_camera(position=(0.0, 0.0, 10.0))
    drawn = draw_starfield(surf, cam, scene, cam.view())
    assert 0 < drawn < 400
    assert non_background_pixels(surf) > 0


def test_orbit_ring_is_drawn():
    surf = make_surface()
    surf.fill(BACKGROUND_COLOR)
    cam = make_camera()
    body = Body(name="B", orbit_radius=100.0, orbit_speed=0.0, rotation_speed=0.0, size=1.0, angle=0.0)
    draw_orbit(surf, cam, body, cam.view(), segments=64)
    assert non_background_pixels(surf) > 0


@pytest.mark.parametrize("show_stars", [True, False])
def test_render_scene_paints_bodies(show_stars):
    builder = functools.partial(build_scene, texture_size=16)
    scene = builder(default_solar_system(), rng=random.Random(4), star_count=100)
    surf = make_surface()
    cam = make_camera(position=(0.0, 40.0, 60.0))
    render_scene(surf, cam, scene, show_orbits=True, show_stars=show_stars, selected_name="Earth")
    assert non_background_pixels(surf) > 0


def test_close_textured_and_ringed_body():
    body = Body(name="Saturn", orbit_radius=30.0, orbit_speed=0.0, rotation_speed=0.01, size=5.0, angle=0.0,
                axial_tilt=-0.05, ring=RingSpec())
    texture = pygame.Surface((16, 16), 0, 32)
    texture.fill((200, 180, 120))
    scene = build_scene(default_solar_system(), rng=random.Random(0), star_count=0, texture_size=8)
    scene.bodies = [body]
    scene.textures = {"Saturn": texture}
    surf = make_surface()
    cam = make_camera(position=(30.0, 10.0, 40.0), target=(30.0, 0.0, 0.0))
    render_scene(surf, cam, scene, show_orbits=False, show_stars=False)
    sx, sy, _ = cam.project(body.position)
    assert tuple(surf.get_at((int(sx), int(sy))))[:3] != BACKGROUND_COLOR


def striped_texture():
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
    texture = pygame.Surface((4, 2), 0, 32)
    for x, c in enumerate(colors):
        for y in range(2):
            texture.set_at((x, y), c)
    return texture, colors


def test_wrapped_strip_is_built_once_per_texture():
    texture, colors = striped_texture()
    strip = _wrapped_strip(texture)
    assert _wrapped_strip(texture) is strip
    assert _strip_cache[id(texture)][0] is texture
    assert strip.get_size() == (8, 2)
    for x, c in enumerate(colors):
        assert tuple(strip.get_at((x, 1)))[:3] == c
        assert tuple(strip.get_at((x + 4, 1)))[:3] == c
    other, _ = striped_texture()
    assert _wrapped_strip(other) is not strip


def test_scrolled_texture_shifts_by_spin_angle():
    texture, colors = striped_texture()
    quarter = scrolled_texture(texture, math.pi / 2, 4)
    assert quarter.get_size() == (4, 4)
    assert [tuple(quarter.get_at((x, 0)))[:3] for x in range(4)] == colors[1:] + colors[:1]
    full = scrolled_texture(texture, 2 * math.pi, 4)
    assert [tuple(full.get_at((x, 3)))[:3] for x in range(4)] == colors


def render_single_body(body, overlay=None):
    scene = build_scene(default_solar_system(), rng=random.Random(0), star_count=0, texture_size=8)
    scene.bodies = [body]
    scene.textures = {}
    scene.overlays = {body.name: overlay} if overlay is not None else {}
    surf = make_surface()
    cam = make_camera(position=(30.0, 10.0, 40.0), target=(30.0, 0.0, 0.0))
    render_scene(surf, cam, scene, show_orbits=False, show_stars=False)
    sx, sy, depth = cam.project(body.position)
    return surf, (int(sx), int(sy)), int(cam.projected_radius(body.size, depth))


def test_atmosphere_rim_is_drawn_just_outside_the_disk():
    def planet(atmosphere):
        return Body(name="Earth", orbit_radius=30.0, orbit_speed=0.0, rotation_speed=0.0, size=5.0,
                    angle=0.0, color=(40, 80, 160), atmosphere=atmosphere)

    with_rim, (cx, cy), radius = render_single_body(planet((0, 136, 255)))
    without_rim, _, _ = render_single_body(planet(None))
    assert radius > 4
    assert tuple(without_rim.get_at((cx + radius + 1, cy)))[:3] == BACKGROUND_COLOR
    assert tuple(with_rim.get_at((cx + radius + 1, cy)))[:3] != BACKGROUND_COLOR


def test_cloud_overlay_changes_the_disk():
    def planet():
        return Body(name="Earth", orbit_radius=30.0, orbit_speed=0.0, rotation_speed=0.3, size=5.0,
                    angle=0.0, color=(10, 10, 10))

    clouds = pygame.Surface((8, 8), pygame.SRCALPHA, 32)
    clouds.fill((255, 255, 255, 255))
    cloudy, center, _ = render_single_body(planet(), clouds)
    clear, _, _ = render_single_body(planet())
    assert tuple(cloudy.get_at(center)) != tuple(clear.get_at(center))
