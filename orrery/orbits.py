#!/usr/bin/env python3
"""
Orbit/rotation integrator for the Solar System Viewer

Responsibilities
- Advance each body's orbital angle and spin angle by its fixed per-tick speeds.
- Place bodies on their circular orbits from the orbital angle, with a small
  cosmetic vertical bob for depth.
- Generate the closed polyline used to draw a body's orbit ring.

Units and conventions
- Angles are radians; speeds are radians per tick (one tick = one rendered frame
  at time scale 1).
- Orbits are circles about the origin in the XZ plane; +y is up.

Numerical notes
- Angles are accumulated without wrapping. sin/cos are periodic so positions stay
  correct; the accumulated value stays small for any realistic session length.
- The update is a closed-form placement from the angle, so orbits never drift
  outward the way an integrated velocity would.

Threading
- This module is pure compute and holds no state. It is used by a controller
  that guards shared data with a lock.
"""

import math
import random
from typing import TYPE_CHECKING, Iterable, List, Optional

from .constants import BOB_AMPLITUDE, ORBIT_SEGMENTS
from .errors import ConfigError
from .vector_utils import Vec3

if TYPE_CHECKING:
    # data_models imports orbit_position from here to place new bodies.
    from .data_models import Body

TWO_PI = 2.0 * math.pi


def orbit_position(angle: float, radius: float, bob_amplitude: float = BOB_AMPLITUDE) -> Vec3:
    """
    Cartesian position of a body on its orbit.

        x = cos(angle) * radius
        y = sin(angle / 2) * bob_amplitude
        z = sin(angle) * radius

    Args:
        angle: Orbital angle in radians
        radius: Orbit radius in scene units
        bob_amplitude: Half-height of the vertical bob in scene units

    Returns:
        (x, y, z) position in scene units
    """
    return (
        math.cos(angle) * radius,
        math.sin(angle * 0.5) * bob_amplitude,
        math.sin(angle) * radius,
    )


def random_angle(rng: Optional[random.Random] = None) -> float:
    """Uniformly random orbital angle in [0, 2π)."""
    rng = rng or random
    return rng.random() * TWO_PI


def place_body(body: "Body", bob_amplitude: float = BOB_AMPLITUDE) -> None:
    """Recompute body.position from its current angle."""
    body.position = orbit_position(body.angle, body.orbit_radius, bob_amplitude)


def advance(bodies: Iterable["Body"], dt_ticks: float = 1, bob_amplitude: float = BOB_AMPLITUDE) -> None:
    """
    Advance every body by dt_ticks ticks (modified in place).

    For each body the orbital angle grows by orbit_speed * dt_ticks and the spin
    angle by rotation_speed * dt_ticks, then the position is recomputed from the
    new orbital angle. Bodies are independent of each other.

    Args:
        bodies: Bodies to update
        dt_ticks: Number of ticks to advance (>= 0, fractional allowed)
        bob_amplitude: Vertical bob amplitude passed to orbit_position

    Raises:
        ConfigError: if dt_ticks is negative or not finite
    """
    if not math.isfinite(dt_ticks) or dt_ticks < 0:
        raise ConfigError(f"dt_ticks must be a finite number >= 0, got {dt_ticks!r}")
    for body in bodies:
        body.angle += body.orbit_speed * dt_ticks
        body.rotation += body.rotation_speed * dt_ticks
        place_body(body, bob_amplitude)


def orbit_ring_points(radius: float, segments: int = ORBIT_SEGMENTS) -> List[Vec3]:
    """
    Points of a circular orbit path in the XZ plane (y = 0).

    The first point is not repeated at the end; draw the result as a closed loop.

    Raises:
        ConfigError: if radius is negative or segments < 3
    """
    if not math.isfinite(radius) or radius < 0:
        raise ConfigError(f"orbit radius must be a finite number >= 0, got {radius!r}")
    if isinstance(segments, bool) or not isinstance(segments, int) or segments < 3:
        raise ConfigError(f"an orbit ring needs an integer number of segments >= 3, got {segments!r}")
    points = []
    for i in range(segments):
        t = (i / segments) * TWO_PI
        points.append((math.cos(t) * radius, 0.0, math.sin(t) * radius))
    return points
