import math

import pytest

from orrery.camera import Camera3D
from orrery.constants import MAX_CAMERA_DISTANCE, MAX_CAMERA_PITCH, MIN_CAMERA_DISTANCE


def test_default_pose():
    cam = Camera3D()
    assert cam.position == pytest.approx((0.0, 120.0, 600.0))
    assert cam.distance == pytest.approx(math.hypot(120.0, 600.0))


def test_target_projects_to_viewport_center():
    cam = Camera3D()
    cam.set_viewport_size(800, 600)
    sx, sy, depth = cam.project((0.0, 0.0, 0.0))
    assert (sx, sy) == pytest.approx((400.0, 300.0))
    assert depth == pytest.approx(cam.distance)


def test_screen_axes():
    cam = Camera3D(position=(0.0, 0.0, 100.0))
    cam.set_viewport_size(800, 600)
    right = cam.project((10.0, 0.0, 0.0))
    up = cam.project((0.0, 10.0, 0.0))
    assert right[0] > 400 and right[1] == pytest.approx(300.0)
    assert up[1] < 300 and up[0] == pytest.approx(400.0)


def test_points_behind_camera_are_culled():
    cam = Camera3D(position=(0.0, 0.0, 100.0))
    assert cam.project((0.0, 0.0, 200.0)) is None
    assert cam.project((0.0, 0.0, 100.0)) is None


def test_projected_radius_shrinks_with_depth():
    cam = Camera3D()
    near = cam.projected_radius(1.0, 10.0)
    far = cam.projected_radius(1.0, 20.0)
    assert near == pytest.approx(2 * far)
    assert cam.projected_radius(1.0, 0.0) == 0.0


def test_zoom_is_clamped():
    cam = Camera3D()
    for _ in range(200):
        cam.zoom(1.1)
    assert cam.distance == pytest.approx(MIN_CAMERA_DISTANCE)
    for _ in range(200):
        cam.zoom(1 / 1.1)
    assert cam.distance == pytest.approx(MAX_CAMERA_DISTANCE)


def test_orbit_keeps_distance_and_clamps_pitch():
    cam = Camera3D()
    d = cam.distance
    cam.orbit(250, 0)
    assert cam.distance == pytest.approx(d)
    cam.orbit(0, 100000)
    assert cam.pitch == pytest.approx(MAX_CAMERA_PITCH)
    cam.orbit(0, -100000)
    assert cam.pitch == pytest.approx(-MAX_CAMERA_PITCH)


def test_pan_moves_target_and_reset_restores():
    cam = Camera3D()
    cam.pan_pixels(50, 0)
    assert cam.target != (0.0, 0.0, 0.0)
    cam.orbit(40, 20)
    cam.zoom(2.0)
    cam.reset()
    assert cam.target == (0.0, 0.0, 0.0)
    assert cam.position == pytest.approx((0.0, 120.0, 600.0))


def test_focus_keeps_orientation():
    cam = Camera3D()
    yaw, pitch, dist = cam.yaw, cam.pitch, cam.distance
    cam.focus((10.0, 0.0, 5.0))
    assert cam.target == (10.0, 0.0, 5.0)
    assert (cam.yaw, cam.pitch, cam.distance) == (yaw, pitch, dist)
    sx, sy, _ = cam.project((10.0, 0.0, 5.0))
    assert (sx, sy) == pytest.approx((cam.viewport_size[0] / 2, cam.viewport_size[1] / 2))
