#!/usr/bin/env python3
"""
Error types for the Solar System Viewer.
"""


class ConfigError(ValueError):
    """Raised eagerly when scene configuration would produce degenerate geometry."""
