#!/usr/bin/env python3
"""
Scene template loading utilities.

This module defines a simple JSON schema and loader for scene templates
(orrery/templates/*.json), plus the built-in solar system used when no template
file is available.

Schema
======
Template JSON (templates/*.json):
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "time_scale": 1.0,                 # optional, ticks per frame
  "star_count": 8000,                # optional
  "bodies": [
    {
      "name": "Saturn",
      "color": "#e3d2a5",            # or [227, 210, 165]
      "radius_rel": 9.45,            # visual radius relative to Earth
      "au": 9.582,                   # orbit radius in AU
      "orbit_speed": 0.0008,         # radians per tick
      "rotation_speed": 0.009,       # radians per tick
      "axial_tilt": -0.05,           # optional, radians
      "texture": {"file": "textures/saturn.jpg"},            # optional
      "texture": {"procedural": ["#bfe7ef", "#79c7d6"]},     # ...or this
      "clouds": {"procedural": ["#ffffff", "#dfe8f5"]},      # optional, same forms
      "atmosphere": "#0088ff",                               # optional limb glow
      "ring": {"inner": 1.2, "outer": 2.0, "color": "#ccc0a8", "opacity": 0.8}  # optional
    }
  ]
}

Relative texture file paths are resolved against the template's directory.
Users can add their own JSON files into the templates folder and they'll be
picked up by the loader. Malformed entries raise ConfigError naming the body
and field instead of being skipped silently.
"""
import json
import logging
import math
import os
from typing import Any, Dict, List, Optional, Tuple

from .constants import ATMOSPHERE_COLOR
from .data_models import BodyConfig, Color, RingSpec, SceneConfig, TextureSpec
from .errors import ConfigError
from .textures import to_color

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")
DEFAULT_TEMPLATE_NAME = "Solar System"


def _read_json(path: str) -> dict:
  try:
    with open(path, "r", encoding="utf-8") as f:
      data = json.load(f)
  except (OSError, json.JSONDecodeError) as exc:
    raise ConfigError(f"cannot read template {path}: {exc}") from exc
  if not isinstance(data, dict):
    raise ConfigError(f"template {path} must contain a JSON object")
  return data


def _coerce_color(owner: str, c: Any) -> Color:
  try:
    color = to_color(c)
  except ConfigError as exc:
    raise ConfigError(f"{owner}: {exc}") from exc
  return (color.r, color.g, color.b)


def _float_field(owner: str, data: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
  if key not in data:
    if default is None:
      raise ConfigError(f"{owner}: missing required field '{key}'")
    return default
  try:
    value = float(data[key])
  except (TypeError, ValueError) as exc:
    raise ConfigError(f"{owner}: field '{key}' must be a number, got {data[key]!r}") from exc
  if not math.isfinite(value):
    raise ConfigError(f"{owner}: field '{key}' must be finite, got {data[key]!r}")
  return value


def _parse_texture(owner: str, data: Any, base_dir: str, key: str = "texture") -> Optional[TextureSpec]:
  if data is None:
    return None
  if not isinstance(data, dict):
    raise ConfigError(f"{owner}: '{key}' must be an object")
  if "file" in data:
    path = str(data["file"])
    if not os.path.isabs(path):
      path = os.path.join(base_dir, path)
    return TextureSpec(file=path)
  if "procedural" in data:
    colors = data["procedural"]
    if not isinstance(colors, (list, tuple)) or len(colors) != 2:
      raise ConfigError(f"{owner}: 'procedural' texture needs exactly two colors")
    for c in colors:
      _coerce_color(owner, c)
    return TextureSpec(colors=(colors[0], colors[1]))
  raise ConfigError(f"{owner}: '{key}' needs either 'file' or 'procedural'")


def _parse_ring(owner: str, data: Any) -> Optional[RingSpec]:
  if data is None:
    return None
  if not isinstance(data, dict):
    raise ConfigError(f"{owner}: 'ring' must be an object")
  inner = _float_field(owner, data, "inner", 1.2)
  outer = _float_field(owner, data, "outer", 2.0)
  color = _coerce_color(owner, data.get("color", [204, 192, 168]))
  opacity = _float_field(owner, data, "opacity", 0.8)
  try:
    return RingSpec(inner=inner, outer=outer, color=color, opacity=opacity)
  except ConfigError as exc:
    raise ConfigError(f"{owner}: {exc}") from exc


def parse_body(data: Any, base_dir: str = TEMPLATES_DIR) -> BodyConfig:
  """Build a BodyConfig from one template entry."""
  if not isinstance(data, dict):
    raise ConfigError(f"body entry must be an object, got {data!r}")
  name = str(data.get("name") or "Body")
  atmosphere = data.get("atmosphere")
  return BodyConfig(
    name=name,
    color=_coerce_color(name, data.get("color", [200, 200, 255])),
    radius_rel=_float_field(name, data, "radius_rel"),
    au=_float_field(name, data, "au"),
    orbit_speed=_float_field(name, data, "orbit_speed"),
    rotation_speed=_float_field(name, data, "rotation_speed"),
    axial_tilt=_float_field(name, data, "axial_tilt", 0.0),
    texture=_parse_texture(name, data.get("texture"), base_dir),
    ring=_parse_ring(name, data.get("ring")),
    clouds=_parse_texture(name, data.get("clouds"), base_dir, "clouds"),
    atmosphere=_coerce_color(name, atmosphere) if atmosphere is not None else None,
  )


def parse_scene(data: Dict[str, Any], fallback_name: str, base_dir: str = TEMPLATES_DIR) -> SceneConfig:
  """Build a SceneConfig from a decoded template object."""
  bodies = data.get("bodies", [])
  if not isinstance(bodies, list):
    raise ConfigError(f"{fallback_name}: 'bodies' must be a list")
  time_scale = data.get("time_scale")
  if time_scale is not None:
    time_scale = _float_field(fallback_name, data, "time_scale")
    if time_scale < 0:
      raise ConfigError(f"{fallback_name}: time_scale must be >= 0, got {time_scale!r}")
  star_count = data.get("star_count")
  if star_count is not None:
    try:
      star_count = int(star_count)
    except (TypeError, ValueError) as exc:
      raise ConfigError(f"{fallback_name}: star_count must be an integer, got {star_count!r}") from exc
    if star_count < 0:
      raise ConfigError(f"{fallback_name}: star_count must be >= 0, got {star_count!r}")
  return SceneConfig(
    name=data.get("name") or fallback_name,
    description=data.get("description", ""),
    bodies=[parse_body(b, base_dir) for b in bodies],
    time_scale=time_scale,
    star_count=star_count,
  )


def list_templates(templates_dir: str = TEMPLATES_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available templates."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(templates_dir):
    return items
  for fn in sorted(os.listdir(templates_dir)):
    if not fn.lower().endswith(".json"):
      continue
    try:
      data = _read_json(os.path.join(templates_dir, fn))
    except ConfigError as exc:
      logger.warning("skipping template %s: %s", fn, exc)
      continue
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_template(file_name: str, templates_dir: str = TEMPLATES_DIR) -> SceneConfig:
  """Load a template JSON by file name (absolute paths are used as-is)."""
  path = file_name if os.path.isabs(file_name) else os.path.join(templates_dir, file_name)
  data = _read_json(path)
  scene = parse_scene(data, os.path.splitext(os.path.basename(file_name))[0], os.path.dirname(path))
  logger.info("loaded template '%s' with %d bodies", scene.name, len(scene.bodies))
  return scene


def default_solar_system() -> SceneConfig:
  """
  Sun-centred system of the eight planets.

  Radii are approximate real radii relative to Earth and orbits are real AU
  distances; speeds are tuned for viewing, not physically scaled.
  """
  saturn_ring = RingSpec(inner=1.2, outer=2.0, color=(204, 192, 168), opacity=0.8)
  bodies = [
    BodyConfig("Mercury", (158, 158, 158), 0.383, 0.387, 0.015, 0.004),
    BodyConfig("Venus", (224, 194, 143), 0.949, 0.723, 0.009, 0.0025),
    BodyConfig("Earth", (70, 110, 200), 1.0, 1.0, 0.006, 0.002, axial_tilt=math.radians(-23.4),
               clouds=TextureSpec(colors=("#ffffff", "#dfe8f5")), atmosphere=ATMOSPHERE_COLOR),
    BodyConfig("Mars", (188, 90, 60), 0.53, 1.524, 0.005, 0.0018, axial_tilt=math.radians(-25.0),
               atmosphere=ATMOSPHERE_COLOR),
    BodyConfig("Jupiter", (216, 162, 107), 11.21, 5.204, 0.0012, 0.01),
    BodyConfig("Saturn", (227, 210, 165), 9.45, 9.582, 0.0008, 0.009, axial_tilt=-0.05, ring=saturn_ring),
    BodyConfig("Uranus", (127, 203, 214), 4.01, 19.218, 0.0005, 0.005,
               texture=TextureSpec(colors=("#bfe7ef", "#79c7d6"))),
    BodyConfig("Neptune", (42, 111, 181), 3.88, 30.11, 0.00035, 0.004,
               texture=TextureSpec(colors=("#5aa1e6", "#134e7a"))),
  ]
  return SceneConfig(name=DEFAULT_TEMPLATE_NAME, bodies=bodies,
                     description="The eight planets on circular orbits around the Sun.")
