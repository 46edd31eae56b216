"""State management utilities for Collageworks UI.

This module handles the initialization and teardown of per-user UI state:
the editor session and the clients it needs for generation and stock search.
"""

import logging

import httpx

from collageworks.core.canvas import Canvas
from collageworks.core.config import CollageworksConfig
from collageworks.core.config import config as default_config
from collageworks.core.orchestrator import GenerationOrchestrator
from collageworks.core.session import EditorSession
from collageworks.core.stock_search import PexelsClient

from .models import UIState

logger = logging.getLogger(__name__)


def initialize_ui_state(state: UIState | None = None, cfg: CollageworksConfig | None = None) -> UIState:
    """Initialize or ensure UI state is ready.

    Missing components are created lazily; components that already exist
    (including ones injected by tests) are kept.

    Args:
        state: Existing UIState or None
        cfg: Configuration (default: global config)

    Returns:
        Initialized UIState instance
    """
    cfg = cfg or default_config

    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized() and state.http_client is not None:
        logger.debug("UIState already initialized")
        return state

    logger.info("Initializing UIState components...")

    if state.session is None:
        state.session = EditorSession(
            canvas=Canvas(
                width=cfg.canvas_width,
                height=cfg.canvas_height,
                layer_max_size=cfg.layer_max_size,
            )
        )

    if state.orchestrator is None:
        state.orchestrator = GenerationOrchestrator.from_config(cfg)

    if state.stock_client is None:
        state.stock_client = PexelsClient.from_config(cfg)

    if state.http_client is None:
        state.http_client = httpx.AsyncClient(timeout=cfg.request_timeout)

    logger.info(f"UIState initialization complete: {state}")
    return state


async def cleanup_ui_state(state: UIState) -> None:
    """Close service clients and drop the session.

    Args:
        state: UI state to clean up
    """
    logger.info("Cleaning up UIState resources")

    if state.orchestrator is not None:
        await state.orchestrator.aclose()
    if state.stock_client is not None:
        await state.stock_client.aclose()
    if state.http_client is not None:
        await state.http_client.aclose()

    state.session = None
    state.orchestrator = None
    state.stock_client = None
    state.http_client = None
    state.stock_results.clear()

    logger.info("UIState cleanup complete")
