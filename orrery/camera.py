#!/usr/bin/env python3
"""
Perspective orbit camera for world-to-screen transforms.

The camera circles a target point at a given distance. yaw turns it about the
world y axis, pitch raises it above the XZ plane. Drag/zoom/pan mirror the usual
orbit-controls behaviour of 3D viewers.
"""
import math
from typing import Optional, Tuple

from .constants import (
    CAMERA_FAR,
    CAMERA_FOV,
    CAMERA_NEAR,
    CAMERA_POSITION,
    MAX_CAMERA_DISTANCE,
    MAX_CAMERA_PITCH,
    MIN_CAMERA_DISTANCE,
    ORBIT_DRAG_SPEED,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import Vec3, clamp, vec_add, vec_cross, vec_dot, vec_len, vec_norm, vec_scale, vec_sub

WORLD_UP = (0.0, 1.0, 0.0)

View = Tuple[Vec3, Vec3, Vec3, Vec3]


class Camera3D:
    """
    Orbit camera that maps world coordinates (scene units) to screen pixels.
    """

    def __init__(self, position: Vec3 = CAMERA_POSITION, target: Vec3 = (0.0, 0.0, 0.0),
                 fov: float = CAMERA_FOV, near: float = CAMERA_NEAR, far: float = CAMERA_FAR):
        self.fov = fov
        self.near = near
        self.far = far
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)
        self._home = (tuple(position), tuple(target))
        self.look_from(position, target)

    def look_from(self, position: Vec3, target: Vec3) -> None:
        """Place the camera at position looking at target."""
        self.target = tuple(target)
        offset = vec_sub(position, target)
        self.distance = clamp(vec_len(offset), MIN_CAMERA_DISTANCE, MAX_CAMERA_DISTANCE)
        horizontal = math.hypot(offset[0], offset[2])
        self.yaw = math.atan2(offset[0], offset[2])
        self.pitch = clamp(math.atan2(offset[1], horizontal), -MAX_CAMERA_PITCH, MAX_CAMERA_PITCH)

    def reset(self) -> None:
        self.look_from(*self._home)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (max(1, w), max(1, h))

    @property
    def position(self) -> Vec3:
        cp = math.cos(self.pitch)
        offset = (
            self.distance * cp * math.sin(self.yaw),
            self.distance * math.sin(self.pitch),
            self.distance * cp * math.cos(self.yaw),
        )
        return vec_add(self.target, offset)

    def basis(self) -> Tuple[Vec3, Vec3, Vec3]:
        """Return (right, up, forward) unit vectors of the view."""
        forward = vec_norm(vec_sub(self.target, self.position))
        right = vec_norm(vec_cross(forward, WORLD_UP))
        up = vec_cross(right, forward)
        return right, up, forward

    def view(self) -> View:
        """Snapshot (eye, right, up, forward) for projecting many points with one pose."""
        right, up, forward = self.basis()
        return (self.position, right, up, forward)

    @property
    def focal_length(self) -> float:
        """Pixels per unit at depth 1."""
        return (self.viewport_size[1] / 2) / math.tan(self.fov / 2)

    def project(self, point: Vec3, view: Optional[View] = None) -> Optional[Tuple[float, float, float]]:
        """
        Project a world point to (screen_x, screen_y, depth).

        Returns None when the point lies outside the near/far range.
        """
        eye, right, up, forward = view or self.view()
        rel = vec_sub(point, eye)
        depth = vec_dot(rel, forward)
        if depth < self.near or depth > self.far:
            return None
        f = self.focal_length / depth
        sx = self.viewport_size[0] / 2 + vec_dot(rel, right) * f
        sy = self.viewport_size[1] / 2 - vec_dot(rel, up) * f
        return (sx, sy, depth)

    def projected_radius(self, radius: float, depth: float) -> float:
        """Screen-space radius in pixels of a sphere of the given radius at depth."""
        if depth <= 0:
            return 0.0
        return radius * self.focal_length / depth

    def orbit(self, dx_pixels: float, dy_pixels: float) -> None:
        """Rotate around the target by a mouse drag."""
        self.yaw -= dx_pixels * ORBIT_DRAG_SPEED
        self.pitch = clamp(self.pitch + dy_pixels * ORBIT_DRAG_SPEED, -MAX_CAMERA_PITCH, MAX_CAMERA_PITCH)

    def zoom(self, factor: float) -> None:
        """factor > 1 moves closer, factor < 1 moves away."""
        factor = clamp(factor, 0.05, 20.0)
        self.distance = clamp(self.distance / factor, MIN_CAMERA_DISTANCE, MAX_CAMERA_DISTANCE)

    def pan_pixels(self, dx_pixels: float, dy_pixels: float) -> None:
        """Slide the target in the view plane so the scene follows the cursor."""
        right, up, _ = self.basis()
        units_per_pixel = self.distance / self.focal_length
        shift = vec_add(vec_scale(right, -dx_pixels * units_per_pixel), vec_scale(up, dy_pixels * units_per_pixel))
        self.target = vec_add(self.target, shift)

    def focus(self, point: Vec3) -> None:
        """Keep yaw, pitch and distance; look at point instead."""
        self.target = tuple(point)
