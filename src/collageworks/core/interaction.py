"""Pointer-driven move/scale/rotate interactions.

Every drag starts from an :class:`InteractionState` captured at pointer-down.
Each pointer-move recomputes the layer geometry from that anchor, never from
the previous move, so rounding errors cannot accumulate over a long drag.

Modes
-----
move
    ``position = pointer - (anchor_point - anchor_origin)``, clamped so the
    transformed box stays inside the canvas.
scale
    ``scale = anchor_value * |pointer - anchor_center| / anchor_distance``,
    clamped to ``[0.1, 3.0]``. The center and starting distance are both
    captured at pointer-down, so returning the pointer to where the drag
    started restores the starting scale exactly.
rotate
    ``rotation = atan2(pointer - center) + 90`` degrees, wrapped into
    ``[0, 360)``; straight up from the center reads as 0.

For scale and rotate the pointer is first clamped to the canvas bounds; the
scale anchor distance is measured from the clamped pointer too.
"""

import math
from dataclasses import dataclass
from typing import Literal

from .canvas import Canvas, ImageLayer, clamp, clamp_scale, normalize_rotation

InteractionMode = Literal["move", "scale", "rotate"]


@dataclass(frozen=True)
class InteractionState:
    """Anchor captured at pointer-down for one drag gesture.

    Attributes:
        mode: Which geometry the drag changes.
        layer_id: Layer being dragged.
        anchor_point: Pointer position at pointer-down.
        anchor_value: Scale (scale mode) or rotation (rotate mode) at
            pointer-down; unused for move.
        anchor_origin: Layer top-left at pointer-down.
        anchor_center: Transformed layer center at pointer-down.
        anchor_distance: Pointer distance from ``anchor_center`` at
            pointer-down (scale mode).
    """

    mode: InteractionMode
    layer_id: str
    anchor_point: tuple[float, float]
    anchor_value: float = 0.0
    anchor_origin: tuple[float, float] = (0.0, 0.0)
    anchor_center: tuple[float, float] = (0.0, 0.0)
    anchor_distance: float = 0.0

    @property
    def offset(self) -> tuple[float, float]:
        """Pointer-to-origin offset used by move mode."""
        return (
            self.anchor_point[0] - self.anchor_origin[0],
            self.anchor_point[1] - self.anchor_origin[1],
        )


def _clamp_to_canvas(canvas: Canvas, x: float, y: float) -> tuple[float, float]:
    return clamp(x, 0.0, canvas.width), clamp(y, 0.0, canvas.height)


def start_interaction(
    mode: InteractionMode,
    layer: ImageLayer,
    x: float,
    y: float,
    canvas: Canvas | None = None,
) -> InteractionState:
    """Capture the anchor for a new drag on *layer*.

    When *canvas* is given, a scale anchor is measured from the pointer
    clamped to the canvas, the same way every later move is measured.
    """
    center = layer.center
    if mode == "scale":
        anchor_value = layer.scale
        if canvas is not None:
            x, y = _clamp_to_canvas(canvas, x, y)
    elif mode == "rotate":
        anchor_value = layer.rotation
    else:
        anchor_value = 0.0

    return InteractionState(
        mode=mode,
        layer_id=layer.id,
        anchor_point=(x, y),
        anchor_value=anchor_value,
        anchor_origin=(layer.x, layer.y),
        anchor_center=center,
        anchor_distance=math.hypot(x - center[0], y - center[1]),
    )


def drag_to(canvas: Canvas, state: InteractionState, x: float, y: float) -> ImageLayer | None:
    """Apply a pointer-move to the layer named by *state*.

    Args:
        canvas: Canvas holding the layer.
        state: Anchor captured at pointer-down.
        x: Current pointer x in canvas pixels.
        y: Current pointer y in canvas pixels.

    Returns:
        The updated layer, or ``None`` if it no longer exists.
    """
    layer = canvas.get(state.layer_id)
    if layer is None:
        return None

    if state.mode == "move":
        offset_x, offset_y = state.offset
        layer.x, layer.y = canvas.clamp_position(layer, x - offset_x, y - offset_y)

    elif state.mode == "scale":
        px, py = _clamp_to_canvas(canvas, x, y)
        if state.anchor_distance > 0:
            cx, cy = state.anchor_center
            distance = math.hypot(px - cx, py - cy)
            layer.scale = clamp_scale(state.anchor_value * (distance / state.anchor_distance))

    elif state.mode == "rotate":
        px, py = _clamp_to_canvas(canvas, x, y)
        cx, cy = layer.center
        angle = math.degrees(math.atan2(py - cy, px - cx)) + 90
        layer.rotation = normalize_rotation(angle)

    return layer
