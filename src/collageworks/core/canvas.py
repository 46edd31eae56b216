"""Layer geometry for the collage canvas.

The canvas holds an ordered list of :class:`ImageLayer` objects. List order is
paint order: the first layer is painted first (bottom), the last layer is
painted last (top). Reordering the list is the only way to change which layer
covers which.

Geometry conventions
--------------------
- ``x``/``y`` is the top-left corner of the layer's *unrotated* box in canvas
  pixels.
- ``width``/``height`` are fixed when the layer is created: the source's
  natural aspect ratio fitted into a ``layer_max_size`` square. Only
  ``scale`` and ``rotation`` change afterwards.
- The transformed box is ``(x, y, width * scale, height * scale)``. Hit
  testing and position clamping use this axis-aligned box and ignore
  rotation.

Transform handles
-----------------
A selected layer exposes two 8x8 hotspots, recomputed on demand:

- ``scale``: centred on the transformed bottom-right corner.
- ``rotate``: centred horizontally on the top edge, 30px above it.

Handles are axis-aligned and do not follow the layer's rotation, so at large
angles they drift away from the visible corner. This is accepted behaviour.
"""

import logging
import random
import uuid
from dataclasses import dataclass, field
from typing import Iterator, Literal

from PIL import Image

from .errors import LayerNotFoundError

logger = logging.getLogger(__name__)

MIN_SCALE = 0.1
MAX_SCALE = 3.0
HANDLE_SIZE = 8
ROTATE_HANDLE_DISTANCE = 30
DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600
DEFAULT_LAYER_MAX_SIZE = 200

HandleKind = Literal["scale", "rotate"]


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into ``[low, high]``; *low* wins if the range is empty."""
    return max(low, min(value, high))


def clamp_scale(scale: float) -> float:
    """Clamp a scale factor into ``[MIN_SCALE, MAX_SCALE]``."""
    return clamp(scale, MIN_SCALE, MAX_SCALE)


def normalize_rotation(degrees: float) -> float:
    """Wrap an angle into ``[0, 360)``."""
    wrapped = degrees % 360.0
    # float modulo can round a tiny negative angle up to exactly 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def fit_to_box(natural_width: int, natural_height: int, max_size: int) -> tuple[float, float]:
    """Fit a source size into a ``max_size`` square, preserving aspect ratio.

    Landscape sources get ``width == max_size``; square and portrait sources
    get ``height == max_size``.

    Raises:
        ValueError: If either natural dimension is not positive.
    """
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(f"Invalid image size {natural_width}x{natural_height}")

    aspect_ratio = natural_width / natural_height
    if aspect_ratio > 1:
        return float(max_size), max_size / aspect_ratio
    return max_size * aspect_ratio, float(max_size)


@dataclass
class ImageLayer:
    """One placed image on the canvas.

    Attributes:
        id: Identifier, unique within a canvas.
        src: Where the pixels came from (URL, data URI, or raw bytes).
        x: Left edge in canvas pixels.
        y: Top edge in canvas pixels.
        width: Unscaled width, fixed at creation.
        height: Unscaled height, fixed at creation.
        scale: Scale factor in ``[0.1, 3.0]``.
        rotation: Rotation in degrees, ``[0, 360)``.
        image: Decoded raster used for rendering.
    """

    id: str
    src: str | bytes
    x: float
    y: float
    width: float
    height: float
    scale: float = 1.0
    rotation: float = 0.0
    image: Image.Image | None = field(default=None, repr=False, compare=False)

    @property
    def scaled_width(self) -> float:
        return self.width * self.scale

    @property
    def scaled_height(self) -> float:
        return self.height * self.scale

    @property
    def center(self) -> tuple[float, float]:
        """Center of the transformed box."""
        return self.x + self.scaled_width / 2, self.y + self.scaled_height / 2

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Transformed box as ``(left, top, right, bottom)``."""
        return self.x, self.y, self.x + self.scaled_width, self.y + self.scaled_height

    def contains(self, x: float, y: float) -> bool:
        """Check whether a point falls inside the transformed box (edges inclusive)."""
        left, top, right, bottom = self.bounds
        return left <= x <= right and top <= y <= bottom


@dataclass(frozen=True)
class TransformHandle:
    """An axis-aligned square hotspot in canvas space."""

    kind: HandleKind
    x: float
    y: float
    size: float = HANDLE_SIZE

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.size / 2, self.y + self.size / 2

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.size and self.y <= py <= self.y + self.size


def transform_handles(layer: ImageLayer) -> tuple[TransformHandle, TransformHandle]:
    """Compute the scale and rotate handles for a layer.

    Returns:
        ``(scale_handle, rotate_handle)``
    """
    half = HANDLE_SIZE / 2
    center_x, _ = layer.center
    scale_handle = TransformHandle(
        kind="scale",
        x=layer.x + layer.scaled_width - half,
        y=layer.y + layer.scaled_height - half,
    )
    rotate_handle = TransformHandle(
        kind="rotate",
        x=center_x - half,
        y=layer.y - ROTATE_HANDLE_DISTANCE,
    )
    return scale_handle, rotate_handle


class Canvas:
    """Fixed-size drawing surface holding an ordered sequence of layers.

    Reorder operations never raise: an unknown id, or a layer already at the
    requested end, leaves the order untouched and returns ``False``.

    Args:
        width: Canvas width in logical pixels.
        height: Canvas height in logical pixels.
        layer_max_size: Bounding square new layers are fitted into.
        rng: Random source for default placement of new layers.
    """

    def __init__(
        self,
        width: int = DEFAULT_CANVAS_WIDTH,
        height: int = DEFAULT_CANVAS_HEIGHT,
        layer_max_size: int = DEFAULT_LAYER_MAX_SIZE,
        rng: random.Random | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.layer_max_size = layer_max_size
        self.layers: list[ImageLayer] = []
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.layers)

    def __iter__(self) -> Iterator[ImageLayer]:
        return iter(self.layers)

    def __repr__(self) -> str:
        return f"Canvas({self.width}x{self.height}, layers={len(self.layers)})"

    @property
    def layer_ids(self) -> list[str]:
        """Layer ids in paint order (bottom first)."""
        return [layer.id for layer in self.layers]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, layer_id: str | None) -> ImageLayer | None:
        """Return the layer with *layer_id*, or ``None``."""
        if layer_id is None:
            return None
        return next((layer for layer in self.layers if layer.id == layer_id), None)

    def require(self, layer_id: str) -> ImageLayer:
        """Return the layer with *layer_id*.

        Raises:
            LayerNotFoundError: If no such layer exists.
        """
        layer = self.get(layer_id)
        if layer is None:
            raise LayerNotFoundError(f"Layer not found: {layer_id}")
        return layer

    def index_of(self, layer_id: str) -> int:
        """Return the paint-order index of a layer, or ``-1``."""
        for index, layer in enumerate(self.layers):
            if layer.id == layer_id:
                return index
        return -1

    def locate_layer_at(self, x: float, y: float) -> ImageLayer | None:
        """Return the topmost layer whose transformed box contains the point."""
        for layer in reversed(self.layers):
            if layer.contains(x, y):
                return layer
        return None

    def locate_handle_at(self, x: float, y: float, layer: ImageLayer) -> TransformHandle | None:
        """Return the handle of *layer* under the point, scale handle first."""
        for handle in transform_handles(layer):
            if handle.contains(x, y):
                return handle
        return None

    # ------------------------------------------------------------------
    # Add / remove
    # ------------------------------------------------------------------

    def _new_id(self) -> str:
        existing = set(self.layer_ids)
        while True:
            candidate = uuid.uuid4().hex[:9]
            if candidate not in existing:
                return candidate

    def add_layer(
        self,
        image: Image.Image,
        src: str | bytes,
        x: float | None = None,
        y: float | None = None,
        layer_id: str | None = None,
    ) -> ImageLayer:
        """Place a decoded image on top of the stack.

        The layer size is fitted from the image's natural size. When *x* or
        *y* is omitted the layer is dropped at a random position that keeps
        it fully inside the canvas.

        Args:
            image: Decoded raster.
            src: Original source reference, kept for display and export.
            x: Left edge, or ``None`` for a random position.
            y: Top edge, or ``None`` for a random position.
            layer_id: Explicit id; generated when omitted.

        Returns:
            The new layer.

        Raises:
            ValueError: If *layer_id* is already in use or the image has no area.
        """
        width, height = fit_to_box(image.width, image.height, self.layer_max_size)

        if layer_id is None:
            layer_id = self._new_id()
        elif self.get(layer_id) is not None:
            raise ValueError(f"Duplicate layer id: {layer_id}")

        if x is None:
            x = self._rng.random() * max(0.0, self.width - width)
        if y is None:
            y = self._rng.random() * max(0.0, self.height - height)

        layer = ImageLayer(
            id=layer_id,
            src=src,
            x=x,
            y=y,
            width=width,
            height=height,
            image=image,
        )
        self.layers.append(layer)
        logger.debug(f"Added layer {layer.id} ({width:.0f}x{height:.0f}) at ({x:.0f}, {y:.0f})")
        return layer

    def remove_layer(self, layer_id: str) -> bool:
        """Remove a layer. Returns ``True`` if something was removed."""
        before = len(self.layers)
        self.layers = [layer for layer in self.layers if layer.id != layer_id]
        return len(self.layers) != before

    def clear(self) -> None:
        """Remove every layer."""
        self.layers = []

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def bring_to_front(self, layer_id: str) -> bool:
        """Move a layer to the end of the sequence (topmost)."""
        index = self.index_of(layer_id)
        if index == -1 or index == len(self.layers) - 1:
            return False
        self.layers.append(self.layers.pop(index))
        return True

    def send_to_back(self, layer_id: str) -> bool:
        """Move a layer to the start of the sequence (bottommost)."""
        index = self.index_of(layer_id)
        if index <= 0:
            return False
        self.layers.insert(0, self.layers.pop(index))
        return True

    def bring_forward(self, layer_id: str) -> bool:
        """Swap a layer with the one directly above it."""
        index = self.index_of(layer_id)
        if index == -1 or index == len(self.layers) - 1:
            return False
        self.layers[index], self.layers[index + 1] = self.layers[index + 1], self.layers[index]
        return True

    def send_backward(self, layer_id: str) -> bool:
        """Swap a layer with the one directly below it."""
        index = self.index_of(layer_id)
        if index <= 0:
            return False
        self.layers[index], self.layers[index - 1] = self.layers[index - 1], self.layers[index]
        return True

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def clamp_position(self, layer: ImageLayer, x: float, y: float) -> tuple[float, float]:
        """Clamp a top-left position so the transformed box stays on the canvas."""
        return (
            clamp(x, 0.0, self.width - layer.scaled_width),
            clamp(y, 0.0, self.height - layer.scaled_height),
        )

    def move_layer_to(self, layer_id: str, x: float, y: float) -> ImageLayer:
        """Move a layer, keeping its transformed box inside the canvas."""
        layer = self.require(layer_id)
        layer.x, layer.y = self.clamp_position(layer, x, y)
        return layer

    def set_transform(
        self,
        layer_id: str,
        scale: float | None = None,
        rotation: float | None = None,
    ) -> ImageLayer:
        """Set scale and/or rotation directly (slider-style controls).

        Scale is clamped to ``[0.1, 3.0]`` and rotation wrapped to ``[0, 360)``.
        """
        layer = self.require(layer_id)
        if scale is not None:
            layer.scale = clamp_scale(scale)
        if rotation is not None:
            layer.rotation = normalize_rotation(rotation)
        return layer

    def reset_transform(self, layer_id: str) -> ImageLayer:
        """Restore scale 1 and rotation 0."""
        return self.set_transform(layer_id, scale=1.0, rotation=0.0)
