"""Collageworks - collage editor with AI enhancement and model comparison."""

__version__ = "0.1.0"

from collageworks.core.config import CollageworksConfig, config

__all__ = [
    "CollageworksConfig",
    "config",
]
