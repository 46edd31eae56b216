"""Pydantic request and response models for the Collageworks API.

These models define the JSON schema for every API endpoint. FastAPI uses
them for request validation, serialisation, and OpenAPI documentation.

Models
------
AddLayerRequest
    Payload for ``POST /api/sessions/{id}/layers``: an image by URL, data
    URI or site-relative path.
TransformRequest
    Payload for ``PATCH /api/sessions/{id}/layers/{layer_id}``.
OrderRequest
    Payload for ``POST /api/sessions/{id}/layers/{layer_id}/order``.
PointerRequest
    Payload for ``POST /api/sessions/{id}/pointer``: one pointer event in
    canvas pixel space.
EnhanceRequest, EditRequest, SuggestionRequest
    Payloads for the generation endpoints.
SessionResponse
    Full editor state returned by every session endpoint.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from collageworks.core.canvas import ImageLayer
from collageworks.core.models import ComparisonResult, StockPhoto
from collageworks.core.session import ContextAction, EditorSession


class AddLayerRequest(BaseModel):
    """Request body for adding an image layer.

    Attributes:
        src: ``http(s)://`` URL, ``data:`` URI, or site-relative path.
        x: Left edge; random when omitted.
        y: Top edge; random when omitted.
    """

    src: str = Field(
        ...,
        min_length=1,
        description="Image URL, base64 data URI, or site-relative path.",
    )
    x: float | None = Field(default=None, description="Left edge in canvas pixels.")
    y: float | None = Field(default=None, description="Top edge in canvas pixels.")


class TransformRequest(BaseModel):
    """Direct scale/rotation update (slider-style controls)."""

    scale: float | None = Field(default=None, description="Scale factor, clamped to 0.1-3.0.")
    rotation: float | None = Field(default=None, description="Rotation in degrees, wrapped to 0-360.")
    x: float | None = Field(default=None, description="New left edge (clamped to the canvas).")
    y: float | None = Field(default=None, description="New top edge (clamped to the canvas).")


class OrderRequest(BaseModel):
    """Reorder one layer in the paint stack."""

    action: Literal["front", "back", "forward", "backward"] = Field(
        ...,
        description="front/back move to the ends; forward/backward swap with a neighbour.",
    )


class PointerRequest(BaseModel):
    """One pointer event on the canvas.

    Attributes:
        action: ``down``/``move``/``up`` drive drags; ``double`` removes the
            layer under the pointer; ``context`` opens the layer menu;
            ``outside`` closes it; ``menu`` runs ``menu_action`` on the menu's
            layer.
        x: Pointer x in canvas pixels.
        y: Pointer y in canvas pixels.
        menu_action: Context menu entry, for ``action="menu"``.
    """

    action: Literal["down", "move", "up", "double", "context", "outside", "menu"]
    x: float = 0.0
    y: float = 0.0
    menu_action: ContextAction | None = None


class EnhanceRequest(BaseModel):
    """Request body for ``POST /api/sessions/{id}/enhance``."""

    prompt: str = Field(
        default="",
        description="Enhancement prompt; blank uses the built-in default.",
    )
    compare: bool = Field(
        default=False,
        description="Run the primary and secondary models side by side and keep the winner.",
    )


class EditRequest(BaseModel):
    """Request body for ``POST /api/sessions/{id}/edit``."""

    instruction: str = Field(..., min_length=1, description="Free-text edit instruction.")


class SuggestionRequest(BaseModel):
    """Request body for ``POST /api/sessions/{id}/suggestions/apply``."""

    suggestion: str = Field(..., min_length=1, description="Suggestion text to apply.")


class LayerModel(BaseModel):
    """Serialised image layer."""

    id: str
    x: float
    y: float
    width: float
    height: float
    scale: float
    rotation: float

    @classmethod
    def from_layer(cls, layer: ImageLayer) -> LayerModel:
        return cls(
            id=layer.id,
            x=layer.x,
            y=layer.y,
            width=layer.width,
            height=layer.height,
            scale=layer.scale,
            rotation=layer.rotation,
        )


class ContextMenuModel(BaseModel):
    visible: bool
    x: float
    y: float
    layer_id: str | None


class ComparisonModel(BaseModel):
    """Serialised A/B comparison record."""

    winner: Literal["image1", "image2"]
    reason: str
    score1: int
    score2: int
    image1_url: str | None = None
    image2_url: str | None = None

    @classmethod
    def from_result(cls, result: ComparisonResult) -> ComparisonModel:
        return cls(
            winner=result.winner,
            reason=result.reason,
            score1=result.score1,
            score2=result.score2,
            image1_url=result.image1_url,
            image2_url=result.image2_url,
        )


class SessionResponse(BaseModel):
    """Everything a client needs to redraw the editor."""

    id: str
    width: int
    height: int
    layers: list[LayerModel]
    selected_id: str | None
    interaction: str | None = Field(
        default=None,
        description="Active drag mode (move/scale/rotate), if any.",
    )
    context_menu: ContextMenuModel
    enhanced_result: str | None
    comparison: ComparisonModel | None
    suggestions: list[str]
    error: str | None
    busy: bool

    @classmethod
    def from_session(cls, session: EditorSession) -> SessionResponse:
        menu = session.context_menu
        return cls(
            id=session.id,
            width=session.canvas.width,
            height=session.canvas.height,
            layers=[LayerModel.from_layer(layer) for layer in session.canvas],
            selected_id=session.selected_id,
            interaction=session.interaction.mode if session.interaction else None,
            context_menu=ContextMenuModel(
                visible=menu.visible, x=menu.x, y=menu.y, layer_id=menu.layer_id
            ),
            enhanced_result=session.enhanced_result,
            comparison=(
                ComparisonModel.from_result(session.comparison) if session.comparison else None
            ),
            suggestions=list(session.suggestions),
            error=session.error,
            busy=session.busy,
        )


class StockPhotoModel(BaseModel):
    """One stock search hit."""

    id: int | str
    url: str
    alt: str
    photographer: str
    photographer_url: str

    @classmethod
    def from_photo(cls, photo: StockPhoto) -> StockPhotoModel:
        return cls(
            id=photo.id,
            url=photo.url,
            alt=photo.alt,
            photographer=photo.photographer,
            photographer_url=photo.photographer_url,
        )


class StockSearchResponse(BaseModel):
    photos: list[StockPhotoModel]
