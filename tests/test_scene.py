import functools
import logging
import math
import random

import pytest

from orrery.constants import AU, SIZE_SCALE, STARFIELD_SPIN
from orrery.controller import SimulationController
from orrery.data_models import BodyConfig, SceneConfig, TextureSpec
from orrery.errors import ConfigError
from orrery.presets_loader import DEFAULT_TEMPLATE_NAME, default_solar_system
from orrery.scene import build_scene, spawn_body

small_scene = functools.partial(build_scene, texture_size=16)


def test_build_default_scene():
    scene = small_scene(default_solar_system(), rng=random.Random(1), star_count=50)
    assert [b.name for b in scene.bodies][0] == "Mercury"
    assert len(scene.bodies) == 8
    assert sorted(scene.textures) == ["Neptune", "Uranus"]
    assert scene.textures["Uranus"].get_size() == (16, 16)
    assert sorted(scene.overlays) == ["Earth"]
    assert scene.get_body("Earth").atmosphere == (0, 136, 255)
    assert len(scene.stars) == 50
    assert scene.sun.size == pytest.approx(109 * 0.6 * 0.02)


def test_bodies_start_on_their_orbits():
    scene = small_scene(default_solar_system(), rng=random.Random(2), star_count=0)
    for b in scene.bodies:
        assert 0.0 <= b.angle < 2 * math.pi
        x, _, z = b.position
        assert math.hypot(x, z) == pytest.approx(b.orbit_radius)
        assert (x, z) == pytest.approx((math.cos(b.angle) * b.orbit_radius, math.sin(b.angle) * b.orbit_radius))


def test_spawn_body_scales_template_units():
    config = BodyConfig("Jupiter", (216, 162, 107), 11.21, 5.204, 0.0012, 0.01)
    body = spawn_body(config, random.Random(0))
    assert body.orbit_radius == pytest.approx(5.204 * AU)
    assert body.size == pytest.approx(11.21 * SIZE_SCALE)
    assert body.rotation == 0.0


def test_same_seed_same_scene():
    a = small_scene(default_solar_system(), rng=random.Random(9), star_count=20)
    b = small_scene(default_solar_system(), rng=random.Random(9), star_count=20)
    assert [x.angle for x in a.bodies] == [x.angle for x in b.bodies]
    assert a.stars == b.stars


def test_tick_advances_bodies_and_spins_stars():
    scene = small_scene(default_solar_system(), rng=random.Random(3), star_count=0)
    earth = scene.get_body("Earth")
    start = earth.angle
    scene.tick()
    scene.tick(4)
    assert earth.angle == pytest.approx(start + 5 * 0.006)
    assert earth.rotation == pytest.approx(5 * 0.002)
    assert scene.star_rotation == pytest.approx(5 * STARFIELD_SPIN)
    assert scene.ticks == 5


def test_duplicate_names_rejected():
    row = BodyConfig("Twin", (1, 2, 3), 1.0, 1.0, 0.01, 0.01)
    with pytest.raises(ConfigError, match="duplicate"):
        small_scene(SceneConfig(name="Twins", bodies=[row, row]), star_count=0)


def test_missing_texture_file_falls_back_to_flat_color(tmp_path, caplog):
    row = BodyConfig("Earth", (70, 110, 200), 1.0, 1.0, 0.006, 0.002,
                     texture=TextureSpec(file=str(tmp_path / "missing.jpg")))
    with caplog.at_level("WARNING"):
        scene = small_scene(SceneConfig(name="Solo", bodies=[row]), star_count=0)
    assert "Earth" not in scene.textures
    assert "missing.jpg" in caplog.text


def test_template_star_count_is_used_unless_overridden():
    config = SceneConfig(name="Few", bodies=[], star_count=7)
    assert len(small_scene(config).stars) == 7
    assert len(small_scene(config, star_count=3).stars) == 3


def make_controller(**kwargs):
    return SimulationController(seed=5, star_count=10, scene_builder=small_scene, **kwargs)


def test_controller_loads_builtin_system():
    sim = make_controller()
    scene = sim.load_template("")
    assert scene.name == DEFAULT_TEMPLATE_NAME
    assert sim.scene is scene
    assert sim.selected_name == "Mercury"
    assert sim.scene_changed


def test_controller_applies_template_time_scale():
    sim = make_controller()
    sim.load_template("inner_planets.json")
    assert sim.time_scale == 4.0
    assert sim.body_names() == ["Mercury", "Venus", "Earth", "Mars"]


def test_step_frame_uses_time_scale_and_respects_pause():
    sim = make_controller()
    sim.load_template("")
    mercury = sim.scene.get_body("Mercury")
    start = mercury.angle
    sim.set_time_scale(3)
    sim.step_frame()
    assert mercury.angle == pytest.approx(start + 3 * 0.015)
    sim.toggle_play()
    sim.step_frame()
    assert mercury.angle == pytest.approx(start + 3 * 0.015)
    sim.step_once()
    assert mercury.angle == pytest.approx(start + 4 * 0.015)


def test_invalid_time_scale_rejected():
    sim = make_controller()
    with pytest.raises(ConfigError):
        sim.set_time_scale(-1)


def test_failed_load_keeps_current_scene():
    sim = make_controller()
    scene = sim.load_template("")
    with pytest.raises(ConfigError):
        sim.load_template("does_not_exist.json")
    assert sim.scene is scene


def test_selection():
    sim = make_controller()
    sim.load_template("")
    assert sim.select_body("Saturn").name == "Saturn"
    assert sim.get_selected_body().ring is not None
    assert sim.select_body("Pluto") is None
    assert sim.get_selected_body() is None


def test_bundled_solar_system_stands_in_for_builtin():
    items = make_controller().templates()
    names = [display for _, display in items]
    assert names.count(DEFAULT_TEMPLATE_NAME) == 1
    assert dict((display, fn) for fn, display in items)[DEFAULT_TEMPLATE_NAME] == "solar_system.json"
    assert "Inner Planets" in names


def test_builtin_offered_when_no_template_provides_it(monkeypatch):
    monkeypatch.setattr("orrery.controller.list_templates", lambda: [("inner_planets.json", "Inner Planets")])
    assert make_controller().templates()[0] == ("", DEFAULT_TEMPLATE_NAME)


@pytest.mark.parametrize("file_name", ["", "solar_system.json", "inner_planets.json"])
def test_bundled_scenes_load_without_warnings(file_name, caplog):
    sim = make_controller()
    with caplog.at_level("WARNING"):
        scene = sim.load_template(file_name)
    assert scene.name
    assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []


def test_startup_scene_matches_the_listed_default():
    builtin = make_controller().load_template("")
    bundled = make_controller().load_template("solar_system.json")
    assert sorted(builtin.textures) == sorted(bundled.textures)
    assert sorted(builtin.overlays) == sorted(bundled.overlays)
    assert [b.atmosphere for b in builtin.bodies] == [b.atmosphere for b in bundled.bodies]
