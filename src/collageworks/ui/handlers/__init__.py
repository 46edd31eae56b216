"""UI event handlers organized by feature area.

- canvas: canvas clicks, transform sliders, layer actions, uploads
- generation: enhancement, edits and suggestions
- stock: stock photo search
"""

from .canvas import (
    add_uploaded_image,
    apply_canvas_tool,
    canvas_click,
    canvas_outputs,
    clear_canvas,
    describe_layers,
    layer_action,
    set_layer_rotation,
    set_layer_scale,
)
from .generation import (
    apply_suggestion,
    edit_result,
    enhance_collage,
    format_comparison,
)
from .stock import (
    add_stock_photo,
    search_stock,
)

__all__ = [
    # Canvas handlers
    "add_uploaded_image",
    "apply_canvas_tool",
    "canvas_click",
    "canvas_outputs",
    "clear_canvas",
    "describe_layers",
    "layer_action",
    "set_layer_rotation",
    "set_layer_scale",
    # Generation handlers
    "apply_suggestion",
    "edit_result",
    "enhance_collage",
    "format_comparison",
    # Stock handlers
    "add_stock_photo",
    "search_stock",
]
