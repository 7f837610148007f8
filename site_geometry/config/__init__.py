"""Configuration components for the site geometry engine."""

from .defaults import (
    DEFAULT_CONFIG,
    GEOMETRY_CONSTANTS,
    MARKER_SETTINGS,
    DEFAULT_PATHS,
)

__all__ = [
    'DEFAULT_CONFIG',
    'GEOMETRY_CONSTANTS',
    'MARKER_SETTINGS',
    'DEFAULT_PATHS',
]
