#!/usr/bin/env python3
"""
Solar System Viewer application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (3D viewport) and the Dear PyGui UI
  (running on the main thread).
- Maintains a shared SimulationController that owns the scene and display settings;
  all access is guarded by a re-entrant lock for thread-safety.
- Provides camera controls, scene templates and a Dear PyGui-based control panel.

Threading model
- PygameRenderer runs in a background thread and owns frame scheduling: each frame it
  handles viewport input, asks the controller to advance one frame's worth of ticks,
  and draws. The tick itself (orrery.orbits.advance) knows nothing about frames.
- The UI class runs in the main thread via Dear PyGui. It refreshes readouts on a periodic
  frame callback and invokes SimulationController methods as needed; these are lock-protected.

Units and conventions
- Scene units throughout (1 AU = 4 units); angles in radians, speeds in radians per tick.
- Colors are RGB tuples in 0..255.

Running
1) Install: `pip install -e .`
2) Run: `python solar_system.py [--template solar_system.json] [--seed 42] [--stars 8000]`

Viewport controls
- Left-drag: orbit camera | Right/Middle-drag: pan | Wheel: zoom | Arrows: orbit
- Space: Pause/Play | R: reset camera | F: focus selected body | L: toggle labels
"""

import argparse
import logging
import math
import sys
import threading
from typing import List, Optional

# GUI and Rendering libs
import pygame
import dearpygui.dearpygui as dpg

from orrery.camera import Camera3D
from orrery.constants import (
    DEFAULT_TIME_SCALE,
    LABEL_COLOR,
    MAX_TIME_SCALE,
    TARGET_FPS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from orrery.controller import SimulationController
from orrery.drawing import draw_text, render_scene
from orrery.errors import ConfigError
from orrery.presets_loader import DEFAULT_TEMPLATE_NAME

logger = logging.getLogger("solar_system")

KEY_ORBIT_SPEED = 300  # pixels-equivalent per second for arrow-key orbiting

# ============================================================
# Pygame Renderer Thread
# ============================================================


class PygameRenderer(threading.Thread):
    """
    Pygame loop: draws starfield, orbits, sun and planets.
    Handles camera orbit, pan and zoom, plus a few keyboard shortcuts.
    """
    def __init__(self, sim: SimulationController):
        super().__init__(daemon=True)
        self.sim = sim
        self.camera = Camera3D()
        self.surface = None
        self.clock = None
        self.dragging_orbit = False
        self.dragging_pan = False
        self.drag_start_screen = (0, 0)
        self.running = True

    def reset_camera(self):
        self.camera.reset()

    def focus_selected(self):
        body = self.sim.get_selected_body()
        if body is not None:
            self.camera.focus(body.position)

    def run(self):
        pygame.init()
        pygame.display.set_caption("Solar System - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()
        logger.info("viewport opened at %dx%d", VIEW_WIDTH, VIEW_HEIGHT)

        while self.running and self.sim.running:
            real_dt = self.clock.tick(TARGET_FPS) / 1000.0

            self.handle_events(real_dt)

            with self.sim.lock:
                if self.sim.scene_changed:
                    self.sim.scene_changed = False
                    self.camera.reset()
            self.sim.step_frame()

            self.draw()

        pygame.quit()
        logger.info("viewport closed")

    def handle_events(self, real_dt):
        keys = pygame.key.get_pressed()
        step = KEY_ORBIT_SPEED * real_dt
        if keys[pygame.K_LEFT]:
            self.camera.orbit(-step, 0)
        if keys[pygame.K_RIGHT]:
            self.camera.orbit(step, 0)
        if keys[pygame.K_UP]:
            self.camera.orbit(0, step)
        if keys[pygame.K_DOWN]:
            self.camera.orbit(0, -step)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.sim.running = False
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.1 if event.y > 0 else 1.0 / 1.1
                self.camera.zoom(factor)

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_SPACE:
                    self.sim.toggle_play()
                elif event.key == pygame.K_r:
                    self.reset_camera()
                elif event.key == pygame.K_f:
                    self.focus_selected()
                elif event.key == pygame.K_l:
                    with self.sim.lock:
                        self.sim.show_labels = not self.sim.show_labels

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    self.dragging_orbit = True
                elif event.button in (2, 3):
                    self.dragging_pan = True
                self.drag_start_screen = event.pos

            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button == 1:
                    self.dragging_orbit = False
                elif event.button in (2, 3):
                    self.dragging_pan = False

            elif event.type == pygame.MOUSEMOTION:
                if self.dragging_orbit or self.dragging_pan:
                    dx = event.pos[0] - self.drag_start_screen[0]
                    dy = event.pos[1] - self.drag_start_screen[1]
                    if self.dragging_orbit:
                        self.camera.orbit(dx, dy)
                    else:
                        self.camera.pan_pixels(dx, dy)
                    self.drag_start_screen = event.pos

    def draw(self):
        surf = self.surface
        with self.sim.lock:
            scene = self.sim.scene
            if scene is None:
                surf.fill((0, 0, 0))
                pygame.display.flip()
                return
            render_scene(
                surf, self.camera, scene,
                show_orbits=self.sim.show_orbits,
                show_stars=self.sim.show_stars,
                show_labels=self.sim.show_labels,
                selected_name=self.sim.selected_name,
            )
            ts = self.sim.time_scale
            playing = self.sim.playing
            ticks = scene.ticks
            name = scene.name

        draw_text(surf, "Left-drag: orbit | Right/Middle-drag: pan | Wheel: zoom | Space: Pause/Play | R: reset | F: focus | L: labels",
                  10, 10, LABEL_COLOR)
        draw_text(surf, f"{name}  Speed: {ts:.2f} ticks/frame  [{'Playing' if playing else 'Paused'}]  t={ticks:.0f}",
                  10, 30, LABEL_COLOR)
        pygame.display.flip()

# ============================================================
# Dear PyGui UI
# ============================================================


class UI:
    """
    Dear PyGui interface: templates, simulation controls, display toggles, body readouts.
    """
    def __init__(self, sim: SimulationController, renderer: PygameRenderer):
        self.sim = sim
        self.renderer = renderer

        self.status_msg_id = None
        self.body_list_id = None
        self.angle_id = None
        self.position_id = None
        self.orbit_id = None
        self.spin_id = None

        self._template_map = {}

        self._build_ui()
        self._refresh_body_list()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        current = dpg.get_frame_count()
        dpg.set_frame_callback(current + 6, self._sync_ui_with_sim)

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Solar System - Controls', width=460, height=620)

        with dpg.window(label="Controls", width=440, height=600, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Template:")
                for fn, display in self.sim.templates():
                    self._template_map[display] = fn
                items = list(self._template_map.keys())
                with self.sim.lock:
                    current = self.sim.scene.name if self.sim.scene else DEFAULT_TEMPLATE_NAME
                dpg.add_combo(items, default_value=current if current in items else items[0],
                              width=200, tag="template_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_template(dpg.get_value("template_combo")))

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)
                dpg.add_button(label="Step", callback=self._step_once)
                dpg.add_button(label="Reset Camera", callback=self.renderer.reset_camera)
                dpg.add_button(label="Focus Selected", callback=self.renderer.focus_selected)
            with dpg.group(horizontal=True):
                dpg.add_text("Speed (ticks/frame):")
                dpg.add_slider_float(min_value=0.0, max_value=MAX_TIME_SCALE, default_value=DEFAULT_TIME_SCALE,
                                     width=220, callback=lambda s, a, u: self._set_time_scale(a), tag="speed_slider")
            with dpg.group(horizontal=True):
                dpg.add_checkbox(label="Orbits", default_value=True, callback=lambda s, a, u: self._set_flag("show_orbits", a))
                dpg.add_checkbox(label="Stars", default_value=True, callback=lambda s, a, u: self._set_flag("show_stars", a))
                dpg.add_checkbox(label="Labels", default_value=False, callback=lambda s, a, u: self._set_flag("show_labels", a),
                                 tag="labels_checkbox")

            dpg.add_separator()

            dpg.add_text("Bodies")
            self.body_list_id = dpg.add_listbox(items=[], width=420, num_items=8, callback=self._on_select_body)
            self.orbit_id = dpg.add_text("Orbit radius: -")
            self.angle_id = dpg.add_text("Orbit angle: -")
            self.spin_id = dpg.add_text("Spin angle: -")
            self.position_id = dpg.add_text("Position: -")

            dpg.add_separator()
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _refresh_body_list(self):
        items = self.sim.body_names()
        with self.sim.lock:
            sel = self.sim.selected_name
        dpg.configure_item(self.body_list_id, items=items)
        if sel in items:
            dpg.set_value(self.body_list_id, sel)

    def _on_select_body(self, sender, app_data, user_data):
        body = self.sim.select_body(app_data)
        if body is not None:
            self._set_status(f"Selected {body.name}.")

    def _toggle_play(self):
        state = "Playing" if self.sim.toggle_play() else "Paused"
        self._set_status(f"Simulation {state}.")

    def _step_once(self):
        self.sim.step_once()
        self._set_status("Stepped one tick.")

    def _set_time_scale(self, value):
        try:
            self.sim.set_time_scale(float(value))
        except (TypeError, ValueError) as exc:
            self._set_error(str(exc))

    def _set_flag(self, name: str, value):
        with self.sim.lock:
            setattr(self.sim, name, bool(value))

    def load_template(self, name: str):
        fn = self._template_map.get(name.strip(), "")
        try:
            scene = self.sim.load_template(fn)
        except ConfigError as exc:
            logger.error("template '%s' rejected: %s", name, exc)
            self._set_error(f"Could not load '{name}': {exc}")
            return
        with self.sim.lock:
            dpg.set_value("speed_slider", self.sim.time_scale)
        self._refresh_body_list()
        self._set_status(f"Loaded template: {scene.name}")

    def _sync_ui_with_sim(self):
        """
        Periodic UI update to reflect the selected body's angles and position.
        """
        with self.sim.lock:
            show_labels = self.sim.show_labels
        dpg.set_value("labels_checkbox", show_labels)

        b = self.sim.get_selected_body()
        if b:
            with self.sim.lock:
                angle = math.degrees(b.angle) % 360.0
                spin = math.degrees(b.rotation) % 360.0
                x, y, z = b.position
                radius = b.orbit_radius
            dpg.set_value(self.orbit_id, f"Orbit radius: {radius:.3f}")
            dpg.set_value(self.angle_id, f"Orbit angle: {angle:.2f} deg")
            dpg.set_value(self.spin_id, f"Spin angle: {spin:.2f} deg")
            dpg.set_value(self.position_id, f"Position: ({x:.3f}, {y:.4f}, {z:.3f})")
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive 3D solar system viewer")
    parser.add_argument("--template", default="",
                        help="template file in orrery/templates (default: built-in solar system)")
    parser.add_argument("--seed", type=int, default=None, help="seed for initial angles, textures and stars")
    parser.add_argument("--stars", type=int, default=None, help="override the template's star count")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        sim = SimulationController(seed=args.seed, star_count=args.stars)
        sim.load_template(args.template)
    except ConfigError as exc:
        logger.error("invalid configuration: %s", exc)
        return 2

    renderer = PygameRenderer(sim)

    # Start Pygame renderer thread
    renderer.start()

    UI(sim, renderer)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        sim.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
