"""Pillow rendering of the collage canvas.

Layers are painted in sequence order. Each layer is scaled, rotated about its
transformed center, and pasted centred on that point, which matches the
translate -> rotate -> scale -> draw-centred order of a 2D canvas context.
Positive rotation is clockwise on screen (y grows downwards), so the raster is
rotated by ``-rotation`` in Pillow's counter-clockwise convention.

The selected layer gets editor chrome on top: a dashed outline of its
transformed box, the two handle squares, and a guide line from the top edge to
the rotate handle. Snapshots sent to the enhancement service are rendered
without chrome.
"""

import base64
import io

from PIL import Image, ImageDraw

from .canvas import Canvas, ImageLayer, transform_handles

BACKGROUND = "#f9fafb"
SELECTION_COLOR = "#3b82f6"
ROTATE_COLOR = "#10b981"
HANDLE_BORDER = "#ffffff"
DASH = 5


def _paste_layer(surface: Image.Image, layer: ImageLayer) -> None:
    if layer.image is None:
        return

    size = (max(1, round(layer.scaled_width)), max(1, round(layer.scaled_height)))
    raster = layer.image.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
    if layer.rotation:
        raster = raster.rotate(-layer.rotation, resample=Image.Resampling.BICUBIC, expand=True)

    cx, cy = layer.center
    position = (round(cx - raster.width / 2), round(cy - raster.height / 2))
    # the raster is its own mask; paste tolerates positions partly off the surface
    surface.paste(raster, position, raster)


def _dashed_line(draw: ImageDraw.ImageDraw, start: tuple[float, float], end: tuple[float, float], width: int) -> None:
    (x0, y0), (x1, y1) = start, end
    length = max(abs(x1 - x0), abs(y1 - y0))
    if length == 0:
        return
    step_x, step_y = (x1 - x0) / length, (y1 - y0) / length
    position = 0.0
    while position < length:
        segment_end = min(position + DASH, length)
        draw.line(
            [
                (x0 + step_x * position, y0 + step_y * position),
                (x0 + step_x * segment_end, y0 + step_y * segment_end),
            ],
            fill=SELECTION_COLOR,
            width=width,
        )
        position += DASH * 2


def _draw_selection(draw: ImageDraw.ImageDraw, layer: ImageLayer) -> None:
    left, top, right, bottom = layer.bounds
    for start, end in (
        ((left, top), (right, top)),
        ((right, top), (right, bottom)),
        ((right, bottom), (left, bottom)),
        ((left, bottom), (left, top)),
    ):
        _dashed_line(draw, start, end, width=2)

    scale_handle, rotate_handle = transform_handles(layer)
    draw.line(
        [(layer.center[0], top), rotate_handle.center],
        fill=ROTATE_COLOR,
        width=2,
    )
    for handle, color in ((scale_handle, SELECTION_COLOR), (rotate_handle, ROTATE_COLOR)):
        draw.rectangle(
            [handle.x, handle.y, handle.x + handle.size, handle.y + handle.size],
            fill=color,
            outline=HANDLE_BORDER,
            width=1,
        )


def render_canvas(
    canvas: Canvas,
    selected_id: str | None = None,
    background: str = BACKGROUND,
) -> Image.Image:
    """Render the canvas to an RGB image.

    Args:
        canvas: Canvas to paint.
        selected_id: Layer to decorate with selection chrome, if any.
        background: Fill color behind all layers.
    """
    surface = Image.new("RGBA", (canvas.width, canvas.height), background)
    for layer in canvas:
        _paste_layer(surface, layer)

    selected = canvas.get(selected_id)
    if selected is not None:
        _draw_selection(ImageDraw.Draw(surface), selected)

    return surface.convert("RGB")


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def snapshot_data_uri(canvas: Canvas, quality: int = 90) -> str:
    """Render the canvas without chrome and encode it as a JPEG data URI."""
    buffer = io.BytesIO()
    render_canvas(canvas).save(buffer, format="JPEG", quality=quality)
    return "data:image/jpeg;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
