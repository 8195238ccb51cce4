#!/usr/bin/env python3
"""
Shared constants for the Solar System Viewer (scene units unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier. Angular speeds are radians per tick, where one
tick is one rendered frame at time scale 1.
"""
import math

# Scene scale
AU = 4.0  # scene units per astronomical unit
SIZE_SCALE = 0.6  # visual size of a body with radius_rel = 1 (Earth)
SUN_RADIUS_REL = 109.0  # Sun radius in Earth radii
SUN_SCALE_FACTOR = 0.02  # extra scale-down so the Sun fits the scene
SUN_COLOR = (255, 204, 51)
SUN_GLOW_COLOR = (255, 216, 140)
SUN_GLOW_SCALE = 1.6
SUN_GLOW_OPACITY = 0.08

# Orbit integrator
BOB_AMPLITUDE = 0.03  # vertical bob, scene units
ORBIT_SEGMENTS = 256
ORBIT_COLOR = (136, 136, 136)
ORBIT_OPACITY = 0.35

# Starfield
STAR_COUNT = 8000
STAR_MIN_RADIUS = 50.0
STAR_MAX_RADIUS = 250.0
STAR_HUE = 0.6
STAR_SATURATION = 0.2
STAR_MIN_LIGHTNESS = 0.1
STAR_LIGHTNESS_RANGE = 0.8
STARFIELD_SPIN = -0.0002  # radians per tick about the y axis

# Procedural textures
TEXTURE_SIZE = 1024
TEXTURE_SPECKLES = 1200
TEXTURE_STREAKS = 10
SPECKLE_MAX_OPACITY = 0.03
STREAK_OPACITY = 0.06

# Cloud layers and atmosphere
CLOUD_PUFFS = 90
CLOUD_HAZE_OPACITY = 0.08
CLOUD_PUFF_OPACITY = 0.5
CLOUD_OPACITY = 0.8  # whole layer, over the surface texture
CLOUD_SPIN_RATIO = 1.15  # clouds turn slightly faster than the ground
ATMOSPHERE_COLOR = (0, 136, 255)
ATMOSPHERE_SCALE = 1.06  # rim radius relative to the disk
ATMOSPHERE_OPACITY = 0.3

# Lighting
AMBIENT_LIGHT = 0.12  # fraction of full brightness on the night side

# Camera
CAMERA_FOV = math.radians(75.0)
CAMERA_NEAR = 0.1
CAMERA_FAR = 4000.0
CAMERA_POSITION = (0.0, 120.0, 600.0)
MIN_CAMERA_DISTANCE = 2.0
MAX_CAMERA_DISTANCE = 2000.0
MAX_CAMERA_PITCH = math.radians(89.0)
ORBIT_DRAG_SPEED = 0.005  # radians per pixel of mouse drag

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
TARGET_FPS = 60
BACKGROUND_COLOR = (0, 0, 4)
LABEL_COLOR = (200, 200, 200)
SELECTION_COLOR = (255, 255, 0)
MAX_TEXTURED_DISK = 256  # pixels; larger disks are shaded but drawn in flat colour

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000

# Simulation controls
DEFAULT_TIME_SCALE = 1.0  # ticks per frame
MAX_TIME_SCALE = 50.0
