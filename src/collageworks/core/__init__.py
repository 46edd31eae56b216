"""Core functionality for collage editing and enhancement.

This module provides the core components for Collageworks:

- **Canvas**: Ordered image layers, hit-testing and transform handles
- **EditorSession**: One user's canvas, selection, gestures and results
- **GenerationOrchestrator**: Enhancement, edit and A/B comparison flows
- **PexelsClient**: Stock photo search
- **CollageworksConfig**: Configuration management using Pydantic Settings
- **config**: Global configuration instance (loads from environment variables)

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - Settings prefixed with COLLAGEWORKS_; credentials also accept their
     conventional unprefixed names

2. **Editor Layer** (canvas.py, interaction.py, rendering.py, session.py):
   - Layer geometry, anchored move/scale/rotate drags, Pillow rendering
   - A single session object with named operations

3. **Generation Layer** (orchestrator.py, prediction.py, sources.py):
   - Submit-and-poll jobs against a predictions API
   - Dual-model comparison with a vision judge

4. **Support Utilities**:
   - vision.py / decoding.py: judgment and suggestions with tagged fallbacks
   - stock_search.py: Pexels search
   - errors.py: exception hierarchy

Usage Example
-------------
    from collageworks.core import Canvas, GenerationOrchestrator, config

    orchestrator = GenerationOrchestrator.from_config(config)
    outcome = await orchestrator.enhance_collage(canvas, prompt="", compare=True)
    print(outcome.image_url, outcome.suggestions)
"""

from collageworks.core.canvas import Canvas, ImageLayer, TransformHandle
from collageworks.core.config import CollageworksConfig, config
from collageworks.core.errors import (
    CollageworksError,
    GenerationError,
    LayerNotFoundError,
    SessionBusyError,
    SourceResolutionError,
    StockSearchError,
)
from collageworks.core.orchestrator import GenerationOrchestrator
from collageworks.core.session import EditorSession
from collageworks.core.stock_search import PexelsClient

__all__ = [
    "Canvas",
    "ImageLayer",
    "TransformHandle",
    "EditorSession",
    "GenerationOrchestrator",
    "PexelsClient",
    "CollageworksConfig",
    "config",
    "CollageworksError",
    "GenerationError",
    "LayerNotFoundError",
    "SessionBusyError",
    "SourceResolutionError",
    "StockSearchError",
]
