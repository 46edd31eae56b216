"""Editor session: one owned state object with named operations.

An :class:`EditorSession` holds everything a single user edits: the canvas,
the current selection, the active drag, the context menu, and the latest
enhancement result with its suggestions. Surfaces (the HTTP API and the Gradio
UI) call the named operations below and render whatever state comes back; they
never mutate the canvas directly.

Generation runs (:meth:`EditorSession.run_enhancement`, :meth:`run_edit`,
:meth:`run_suggestion`) set ``busy`` for their duration. A second run while
busy raises :class:`SessionBusyError`. Failures are recorded as user-facing
text in ``error`` rather than raised, matching how the surfaces display them.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, get_args

from .canvas import Canvas, ImageLayer
from .errors import CollageworksError, SessionBusyError
from .interaction import InteractionState, drag_to, start_interaction
from .models import ComparisonResult, EnhancementOutcome

if TYPE_CHECKING:
    from PIL import Image

    from .orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

ContextAction = Literal["reset", "front", "forward", "backward", "back", "delete"]

CONTEXT_ACTIONS: tuple[str, ...] = get_args(ContextAction)

NO_RESULT_ERROR = "Please enhance the collage first before applying suggestions"
EMPTY_CANVAS_ERROR = "Add at least one image to the canvas before enhancing"


@dataclass
class ContextMenu:
    """Right-click menu for one layer. Coordinates are where it was opened."""

    visible: bool = False
    x: float = 0.0
    y: float = 0.0
    layer_id: str | None = None

    @classmethod
    def hidden(cls) -> "ContextMenu":
        return cls()


@dataclass
class EditorSession:
    """State of one collage editing session.

    Attributes
    ----------
    canvas : Canvas
        Layers being edited
    id : str
        Session identifier
    selected_id : str | None
        Currently selected layer
    interaction : InteractionState | None
        Active drag gesture, if any
    context_menu : ContextMenu
        Layer context menu
    enhanced_result : str | None
        Latest enhancement or edit result (image URL)
    comparison : ComparisonResult | None
        Comparison record from the last enhancement in A/B mode
    suggestions : list[str]
        Improvement suggestions for the latest enhancement
    error : str | None
        Last user-facing error message
    busy : bool
        A generation run is in progress
    """

    canvas: Canvas = field(default_factory=Canvas)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    selected_id: str | None = None
    interaction: InteractionState | None = None
    context_menu: ContextMenu = field(default_factory=ContextMenu.hidden)
    enhanced_result: str | None = None
    comparison: ComparisonResult | None = None
    suggestions: list[str] = field(default_factory=list)
    error: str | None = None
    busy: bool = False

    @property
    def selected_layer(self) -> ImageLayer | None:
        return self.canvas.get(self.selected_id)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def add_image(
        self,
        image: "Image.Image",
        src: str | bytes,
        x: float | None = None,
        y: float | None = None,
    ) -> ImageLayer:
        """Place an image on the canvas and select it."""
        layer = self.canvas.add_layer(image, src, x=x, y=y)
        self.selected_id = layer.id
        return layer

    def select(self, layer_id: str | None) -> ImageLayer | None:
        """Select a layer by id; an unknown id or ``None`` clears the selection."""
        layer = self.canvas.get(layer_id)
        self.selected_id = layer.id if layer is not None else None
        return layer

    def remove_layer(self, layer_id: str) -> bool:
        removed = self.canvas.remove_layer(layer_id)
        if removed and self.selected_id == layer_id:
            self.selected_id = None
        if removed and self.context_menu.layer_id == layer_id:
            self.context_menu = ContextMenu.hidden()
        if self.interaction is not None and self.interaction.layer_id == layer_id:
            self.interaction = None
        return removed

    def clear(self) -> None:
        """Remove every layer and forget the result, error and suggestions."""
        self.canvas.clear()
        self.selected_id = None
        self.interaction = None
        self.context_menu = ContextMenu.hidden()
        self.enhanced_result = None
        self.comparison = None
        self.error = None
        self.suggestions = []

    # ------------------------------------------------------------------
    # Pointer gestures
    # ------------------------------------------------------------------

    def begin_drag(self, x: float, y: float) -> InteractionState | None:
        """Handle pointer-down.

        Handles of the selected layer take priority over layer bodies. A hit
        on a layer body selects it and starts a move; a miss clears the
        selection.
        """
        selected = self.selected_layer
        if selected is not None:
            handle = self.canvas.locate_handle_at(x, y, selected)
            if handle is not None:
                self.interaction = start_interaction(handle.kind, selected, x, y, canvas=self.canvas)
                return self.interaction

        layer = self.canvas.locate_layer_at(x, y)
        if layer is None:
            self.selected_id = None
            self.interaction = None
            return None

        self.selected_id = layer.id
        self.interaction = start_interaction("move", layer, x, y)
        return self.interaction

    def begin_move_from_center(self) -> InteractionState | None:
        """Start a move drag on the selected layer, grabbed at its center.

        Used where the pointer can only click, so the drag is replayed from
        the center to the clicked point.
        """
        layer = self.selected_layer
        if layer is None:
            self.interaction = None
            return None
        cx, cy = layer.center
        self.interaction = start_interaction("move", layer, cx, cy)
        return self.interaction

    def update_drag(self, x: float, y: float) -> ImageLayer | None:
        """Handle pointer-move; does nothing unless a drag is active."""
        if self.interaction is None:
            return None
        return drag_to(self.canvas, self.interaction, x, y)

    def end_drag(self) -> None:
        """Handle pointer-up or pointer-leave."""
        self.interaction = None

    def double_click(self, x: float, y: float) -> str | None:
        """Remove the layer under the pointer. Returns its id, if any."""
        layer = self.canvas.locate_layer_at(x, y)
        if layer is None:
            return None
        self.remove_layer(layer.id)
        return layer.id

    def open_context_menu(self, x: float, y: float) -> ContextMenu:
        """Open the menu on the layer under the pointer, or hide it on a miss."""
        layer = self.canvas.locate_layer_at(x, y)
        if layer is None:
            self.context_menu = ContextMenu.hidden()
        else:
            self.context_menu = ContextMenu(visible=True, x=x, y=y, layer_id=layer.id)
        return self.context_menu

    def close_context_menu(self) -> None:
        self.context_menu = ContextMenu.hidden()

    def click_outside(self) -> None:
        """A click anywhere outside the open menu closes it."""
        if self.context_menu.visible:
            self.close_context_menu()

    def context_action(self, action: ContextAction) -> bool:
        """Run a menu action on the menu's layer and close the menu.

        Returns:
            ``True`` if the canvas changed.

        Raises:
            ValueError: If *action* is not a known menu action.
        """
        if action not in CONTEXT_ACTIONS:
            raise ValueError(f"Unknown context action: {action}")

        layer_id = self.context_menu.layer_id
        self.close_context_menu()
        if layer_id is None or self.canvas.get(layer_id) is None:
            return False
        return self.apply_layer_action(layer_id, action)

    def apply_layer_action(self, layer_id: str, action: ContextAction) -> bool:
        """Apply a reorder, reset or delete action to one layer."""
        if action == "reset":
            self.canvas.reset_transform(layer_id)
            return True
        if action == "front":
            return self.canvas.bring_to_front(layer_id)
        if action == "forward":
            return self.canvas.bring_forward(layer_id)
        if action == "backward":
            return self.canvas.send_backward(layer_id)
        if action == "back":
            return self.canvas.send_to_back(layer_id)
        if action == "delete":
            return self.remove_layer(layer_id)
        raise ValueError(f"Unknown layer action: {action}")

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _claim(self) -> None:
        if self.busy:
            raise SessionBusyError("A generation is already running for this session")
        self.busy = True
        self.error = None

    async def run_enhancement(
        self,
        orchestrator: "GenerationOrchestrator",
        prompt: str = "",
        compare: bool = False,
    ) -> EnhancementOutcome | None:
        """Enhance the current canvas and store the result and suggestions.

        Returns:
            The outcome, or ``None`` if the run failed (see ``error``).

        Raises:
            SessionBusyError: If another run is in progress.
        """
        if len(self.canvas) == 0:
            self.error = EMPTY_CANVAS_ERROR
            return None

        self._claim()
        self.enhanced_result = None
        self.comparison = None
        self.suggestions = []
        try:
            outcome = await orchestrator.enhance_collage(self.canvas, prompt, compare=compare)
        except CollageworksError as e:
            logger.error(f"Enhancement failed for session {self.id}: {e}")
            self.error = str(e)
            return None
        finally:
            self.busy = False

        self.enhanced_result = outcome.image_url
        self.comparison = outcome.comparison
        self.suggestions = list(outcome.suggestions)
        return outcome

    async def run_edit(self, orchestrator: "GenerationOrchestrator", instruction: str) -> str | None:
        """Refine the latest result with a free-text instruction.

        Does nothing without a result or with a blank instruction.
        """
        instruction = instruction.strip()
        if self.enhanced_result is None or not instruction:
            return None

        self._claim()
        try:
            result = await orchestrator.edit(self.enhanced_result, instruction)
        except CollageworksError as e:
            logger.error(f"Edit failed for session {self.id}: {e}")
            self.error = str(e)
            return None
        finally:
            self.busy = False

        self.enhanced_result = result
        return result

    async def run_suggestion(self, orchestrator: "GenerationOrchestrator", suggestion: str) -> str | None:
        """Apply one suggestion to the latest result."""
        if self.enhanced_result is None:
            self.error = NO_RESULT_ERROR
            return None

        self._claim()
        try:
            result = await orchestrator.apply_suggestion(self.enhanced_result, suggestion)
        except CollageworksError as e:
            logger.error(f"Applying suggestion failed for session {self.id}: {e}")
            self.error = str(e)
            return None
        finally:
            self.busy = False

        self.enhanced_result = result
        return result
