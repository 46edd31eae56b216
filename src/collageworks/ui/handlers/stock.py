"""Stock photo search handlers."""

import logging

import gradio as gr

from collageworks.core.errors import CollageworksError, StockSearchError
from collageworks.core.sources import load_layer_image

from ..models import UIState
from ..state import initialize_ui_state
from .canvas import CanvasOutputs, canvas_outputs

logger = logging.getLogger(__name__)


async def search_stock(query: str, state: UIState) -> tuple[list[tuple[str, str]], str, UIState]:
    """Search stock photos and fill the results gallery.

    Returns:
        Tuple of (gallery_items, status_md, updated_state); gallery items are
        ``(url, caption)`` pairs
    """
    state = initialize_ui_state(state)
    try:
        photos = await state.stock_client.search(query)
    except StockSearchError as e:
        logger.warning(f"Stock search failed ({e.status_code}): {e}")
        return [], f"❌ {e}", state

    state.stock_results = photos
    items = [(photo.url, f"{photo.alt or 'Photo'} by {photo.photographer}") for photo in photos]
    status = f"Found {len(photos)} photos" if photos else "No photos found"
    return items, status, state


async def add_stock_photo(state: UIState, evt: gr.SelectData) -> CanvasOutputs:
    """Place the clicked stock photo on the canvas.

    Args:
        state: UI state
        evt: Gradio select event; ``evt.index`` is the gallery position
    """
    state = initialize_ui_state(state)
    index = evt.index
    if not isinstance(index, int) or not 0 <= index < len(state.stock_results):
        return canvas_outputs(state, "⚠️ That photo is no longer available")

    photo = state.stock_results[index]
    try:
        data = await state.stock_client.fetch_image(photo.url)
        image = await load_layer_image(data)
    except CollageworksError as e:
        logger.warning(f"Could not add stock photo {photo.id}: {e}")
        return canvas_outputs(state, f"❌ **Stock Photo Error**\n\n{e}")

    layer = state.session.add_image(image, photo.url)
    logger.info(f"Added stock photo {photo.id} as layer {layer.id}")
    return canvas_outputs(state, f"Added photo by {photo.photographer}")
