#!/usr/bin/env python3
"""
Simulation controller shared between the renderer thread and the UI thread.

The renderer calls step_frame() once per rendered frame; the UI flips flags and
loads templates. All access goes through a re-entrant lock so each tick sees a
consistent scene.
"""
import logging
import math
import random
import threading
from typing import Callable, List, Optional, Tuple

from .constants import DEFAULT_TIME_SCALE, MAX_TIME_SCALE
from .data_models import Body, SceneConfig
from .errors import ConfigError
from .presets_loader import DEFAULT_TEMPLATE_NAME, default_solar_system, list_templates, load_template
from .scene import Scene, build_scene
from .vector_utils import clamp

logger = logging.getLogger(__name__)


class SimulationController:
    """
    Shared state between UI thread (DearPyGui) and rendering thread (Pygame).
    Includes thread-safe operations guarded by a lock.
    """

    def __init__(self, seed: Optional[int] = None, star_count: Optional[int] = None,
                 scene_builder: Callable[..., Scene] = build_scene):
        self.lock = threading.RLock()
        self.rng = random.Random(seed)
        self.star_count = star_count
        self._scene_builder = scene_builder
        self.scene: Optional[Scene] = None
        self.running = True  # app running
        self.playing = True  # simulation running
        self.time_scale = DEFAULT_TIME_SCALE  # ticks per frame
        self.show_orbits = True
        self.show_stars = True
        self.show_labels = False
        self.selected_name: Optional[str] = None
        self.scene_changed = False  # set on load, cleared by the renderer

    def templates(self) -> List[Tuple[str, str]]:
        """
        (file_name, display_name) pairs.

        The bundled solar_system.json describes the same scene as the built-in
        system, so the built-in entry (empty file name) is only added when no
        template file already carries its display name.
        """
        items = list_templates()
        if not any(display == DEFAULT_TEMPLATE_NAME for _, display in items):
            items.insert(0, ("", DEFAULT_TEMPLATE_NAME))
        return items

    def load_config(self, config: SceneConfig) -> Scene:
        """Replace the scene with one built from config."""
        scene = self._scene_builder(config, rng=self.rng, star_count=self.star_count)
        with self.lock:
            self.scene = scene
            if config.time_scale is not None:
                self.time_scale = clamp(config.time_scale, 0.0, MAX_TIME_SCALE)
            self.selected_name = scene.bodies[0].name if scene.bodies else None
            self.scene_changed = True
        return scene

    def load_template(self, file_name: str = "") -> Scene:
        """
        Load a template by file name; an empty name loads the built-in system.

        Raises:
            ConfigError: if the template is unreadable or invalid; the current
                scene is left untouched in that case.
        """
        config = load_template(file_name) if file_name else default_solar_system()
        return self.load_config(config)

    def set_time_scale(self, s: float):
        if not math.isfinite(s) or s < 0:
            raise ConfigError(f"time scale must be a finite number >= 0, got {s!r}")
        with self.lock:
            self.time_scale = clamp(float(s), 0.0, MAX_TIME_SCALE)
        logger.debug("time scale set to %.3f ticks/frame", self.time_scale)

    def toggle_play(self) -> bool:
        with self.lock:
            self.playing = not self.playing
            logger.debug("simulation %s", "playing" if self.playing else "paused")
            return self.playing

    def step_frame(self):
        """Advance the scene by time_scale ticks if playing."""
        with self.lock:
            if self.scene is None or not self.playing or self.time_scale <= 0:
                return
            self.scene.tick(self.time_scale)

    def step_once(self):
        """Advance exactly one tick, whether playing or paused."""
        with self.lock:
            if self.scene is not None:
                self.scene.tick(1)

    def select_body(self, name: Optional[str]) -> Optional[Body]:
        with self.lock:
            if self.scene is None or name is None:
                self.selected_name = None
                return None
            body = self.scene.get_body(name)
            self.selected_name = body.name if body else None
            return body

    def get_selected_body(self) -> Optional[Body]:
        with self.lock:
            if self.scene is None or self.selected_name is None:
                return None
            return self.scene.get_body(self.selected_name)

    def body_names(self) -> List[str]:
        with self.lock:
            if self.scene is None:
                return []
            return [b.name for b in self.scene.bodies]
