"""Data models for Collageworks UI state."""

import logging
from dataclasses import dataclass, field
from typing import Any

from collageworks.core.models import StockPhoto

logger = logging.getLogger(__name__)


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Each browser session gets its own UIState instance, so canvases and
    results never leak between users.

    Attributes
    ----------
    session : Any | None
        EditorSession holding the canvas, selection and results
    orchestrator : Any | None
        GenerationOrchestrator used for enhance/edit/suggestion runs
    stock_client : Any | None
        PexelsClient for stock photo search
    http_client : Any | None
        httpx.AsyncClient used to download layer images by URL
    stock_results : list[StockPhoto]
        Photos from the last stock search, in gallery order
    """

    session: Any | None = None  # EditorSession instance
    orchestrator: Any | None = None  # GenerationOrchestrator instance
    stock_client: Any | None = None  # PexelsClient instance
    http_client: Any | None = None  # httpx.AsyncClient instance
    stock_results: list[StockPhoto] = field(default_factory=list)

    def is_initialized(self) -> bool:
        """Check if the session and service clients have been created."""
        return (
            self.session is not None
            and self.orchestrator is not None
            and self.stock_client is not None
        )

    def __repr__(self) -> str:
        layers = len(self.session.canvas) if self.session is not None else 0
        return (
            f"UIState(initialized={self.is_initialized()}, "
            f"layers={layers}, stock_results={len(self.stock_results)})"
        )


# Canvas click tools
CANVAS_TOOLS = [
    "Select",  # Select the layer under the pointer
    "Move",  # Move the selected layer's center to the pointer
    "Scale",  # Drag the scale handle to the pointer
    "Rotate",  # Point the rotate handle at the pointer
    "Remove",  # Remove the layer under the pointer
]

# Layer action buttons, mirroring the canvas context menu
LAYER_ACTIONS = {
    "Bring to Front": "front",
    "Bring Forward": "forward",
    "Send Backward": "backward",
    "Send to Back": "back",
    "Reset Transform": "reset",
    "Delete": "delete",
}
