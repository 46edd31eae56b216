"""Canvas editing handlers: clicks, transforms, layer actions and uploads."""

import logging
from pathlib import Path

import gradio as gr
from PIL import Image

from collageworks.core.canvas import transform_handles
from collageworks.core.errors import CollageworksError
from collageworks.core.rendering import render_canvas
from collageworks.core.session import EditorSession
from collageworks.core.sources import load_layer_image, read_image_file

from ..models import LAYER_ACTIONS, UIState
from ..state import initialize_ui_state
from ..validation import ValidationError

logger = logging.getLogger(__name__)

CanvasOutputs = tuple[Image.Image, str, dict, dict, str, UIState]


def describe_layers(session: EditorSession) -> str:
    """Markdown list of layers, topmost first, with the selection marked."""
    if len(session.canvas) == 0:
        return "*Canvas is empty. Upload an image or add one from stock search.*"

    lines = ["**Layers** (top first)"]
    for layer in reversed(session.canvas.layers):
        marker = "▶ " if layer.id == session.selected_id else ""
        lines.append(
            f"- {marker}`{layer.id}` at ({layer.x:.0f}, {layer.y:.0f}), "
            f"scale {layer.scale:.2f}, rotation {layer.rotation:.0f}°"
        )
    return "\n".join(lines)


def canvas_outputs(state: UIState, status: str = "") -> CanvasOutputs:
    """Build the standard output tuple for canvas handlers."""
    session = state.session
    selected = session.selected_layer
    if selected is None:
        scale_update = gr.update(value=1.0, interactive=False)
        rotation_update = gr.update(value=0, interactive=False)
    else:
        scale_update = gr.update(value=round(selected.scale, 2), interactive=True)
        rotation_update = gr.update(value=round(selected.rotation), interactive=True)

    image = render_canvas(session.canvas, selected_id=session.selected_id)
    return image, describe_layers(session), scale_update, rotation_update, status, state


def apply_canvas_tool(session: EditorSession, tool: str, x: float, y: float) -> str:
    """Turn one canvas click into a complete pointer gesture.

    A click can't be dragged, so Move, Scale and Rotate replay a drag from the
    relevant anchor (layer center or handle) to the clicked point.

    Returns:
        Status message for the UI

    Raises:
        ValidationError: If the tool needs a selected layer and none is selected
    """
    if tool == "Select":
        session.begin_drag(x, y)
        session.end_drag()
        return "" if session.selected_id else "Nothing selected"

    if tool == "Remove":
        removed = session.double_click(x, y)
        return f"Removed layer `{removed}`" if removed else "No layer under the pointer"

    layer = session.selected_layer
    if layer is None:
        raise ValidationError("Select a layer first")

    if tool == "Move":
        session.begin_move_from_center()
    elif tool in ("Scale", "Rotate"):
        scale_handle, rotate_handle = transform_handles(layer)
        handle = scale_handle if tool == "Scale" else rotate_handle
        session.begin_drag(*handle.center)
    else:
        raise ValidationError(f"Unknown tool: {tool}")

    session.update_drag(x, y)
    session.end_drag()
    return ""


def canvas_click(tool: str, state: UIState, evt: gr.SelectData) -> CanvasOutputs:
    """Handle a click on the canvas image.

    Args:
        tool: Selected canvas tool
        state: UI state
        evt: Gradio select event; ``evt.index`` is ``[x, y]`` in canvas pixels

    Returns:
        Tuple of (canvas_image, layer_info, scale_update, rotation_update, status, updated_state)
    """
    state = initialize_ui_state(state)
    x, y = evt.index[0], evt.index[1]
    try:
        status = apply_canvas_tool(state.session, tool, float(x), float(y))
    except ValidationError as e:
        status = f"⚠️ {e}"
    return canvas_outputs(state, status)


def set_layer_scale(scale: float, state: UIState) -> CanvasOutputs:
    """Apply the scale slider to the selected layer."""
    state = initialize_ui_state(state)
    session = state.session
    if session.selected_id is not None:
        session.canvas.set_transform(session.selected_id, scale=scale)
    return canvas_outputs(state)


def set_layer_rotation(rotation: float, state: UIState) -> CanvasOutputs:
    """Apply the rotation slider to the selected layer."""
    state = initialize_ui_state(state)
    session = state.session
    if session.selected_id is not None:
        session.canvas.set_transform(session.selected_id, rotation=rotation)
    return canvas_outputs(state)


def layer_action(label: str, state: UIState) -> CanvasOutputs:
    """Run a layer menu action (reorder, reset, delete) on the selected layer."""
    state = initialize_ui_state(state)
    session = state.session
    action = LAYER_ACTIONS.get(label)
    if action is None or session.selected_id is None:
        return canvas_outputs(state, "⚠️ Select a layer first")

    changed = session.apply_layer_action(session.selected_id, action)
    return canvas_outputs(state, "" if changed else f"{label}: nothing to change")


async def add_uploaded_image(path: str | None, state: UIState) -> CanvasOutputs:
    """Place an uploaded image file on the canvas.

    Args:
        path: Local path of the uploaded file (from ``gr.File``/``gr.Image``)
        state: UI state
    """
    state = initialize_ui_state(state)
    if not path:
        return canvas_outputs(state)

    try:
        image = await load_layer_image(read_image_file(Path(path)))
        layer = state.session.add_image(image, path)
        logger.info(f"Added uploaded image as layer {layer.id}")
        return canvas_outputs(state, "")
    except CollageworksError as e:
        logger.warning(f"Upload failed: {e}")
        return canvas_outputs(state, f"❌ **Upload Error**\n\n{e}")


def clear_canvas(state: UIState) -> tuple[Image.Image, str, dict, dict, str, None, str, dict, UIState]:
    """Clear the canvas and forget the result, error and suggestions.

    Returns:
        Canvas outputs followed by (result_image, comparison_md, suggestions_update)
        and the updated state
    """
    state = initialize_ui_state(state)
    state.session.clear()
    image, info, scale_update, rotation_update, status, state = canvas_outputs(state)
    return (
        image,
        info,
        scale_update,
        rotation_update,
        status,
        None,
        "",
        gr.update(choices=[], value=None),
        state,
    )
