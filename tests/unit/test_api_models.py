"""Tests for collageworks.api.models: request validation and response building.

Tests cover:
- Request defaults and validation constraints.
- SessionResponse built from a live EditorSession.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from collageworks.api.models import (
    AddLayerRequest,
    EditRequest,
    EnhanceRequest,
    OrderRequest,
    PointerRequest,
    SessionResponse,
    StockPhotoModel,
)
from collageworks.core.models import ComparisonResult, StockPhoto


class TestRequests:
    """Validate request model defaults and constraints."""

    def test_add_layer_defaults_to_random_position(self):
        """Omitted coordinates stay None so the canvas picks a spot."""
        req = AddLayerRequest(src="https://x/a.png")
        assert req.x is None and req.y is None

    def test_add_layer_requires_src(self):
        """An empty src is rejected."""
        with pytest.raises(ValidationError):
            AddLayerRequest(src="")

    def test_enhance_defaults(self):
        """Enhance defaults to a blank prompt and a single model."""
        req = EnhanceRequest()
        assert req.prompt == ""
        assert req.compare is False

    def test_order_action_literal(self):
        """Only the four reorder actions are accepted."""
        assert OrderRequest(action="front").action == "front"
        with pytest.raises(ValidationError):
            OrderRequest(action="sideways")

    def test_pointer_menu_action(self):
        """Menu events carry a context menu action."""
        req = PointerRequest(action="menu", menu_action="delete")
        assert req.menu_action == "delete"
        with pytest.raises(ValidationError):
            PointerRequest(action="menu", menu_action="explode")

    def test_edit_requires_instruction(self):
        """An empty instruction is rejected."""
        with pytest.raises(ValidationError):
            EditRequest(instruction="")


class TestSessionResponse:
    """Validate SessionResponse.from_session."""

    def test_empty_session(self, session):
        """A fresh session serialises with no layers and a hidden menu."""
        resp = SessionResponse.from_session(session)
        assert resp.id == session.id
        assert (resp.width, resp.height) == (800, 600)
        assert resp.layers == []
        assert resp.selected_id is None
        assert resp.interaction is None
        assert resp.context_menu.visible is False
        assert resp.comparison is None
        assert resp.busy is False

    def test_layers_and_interaction(self, layered_session):
        """Layers, selection and the active drag mode are reported."""
        layered_session.begin_drag(300, 250)
        resp = SessionResponse.from_session(layered_session)

        assert resp.selected_id == "a"
        assert resp.interaction == "scale"
        layer = resp.layers[0]
        assert (layer.id, layer.x, layer.y, layer.width, layer.height) == ("a", 100, 100, 200, 150)

    def test_results(self, layered_session):
        """Result, comparison and suggestions are included."""
        layered_session.enhanced_result = "https://x/2.jpg"
        layered_session.comparison = ComparisonResult(
            winner="image2", reason="Sharper", score1=6, score2=9,
            image1_url="https://x/1.jpg", image2_url="https://x/2.jpg",
        )
        layered_session.suggestions = ["Warmer light"]

        data = SessionResponse.from_session(layered_session).model_dump()

        assert data["enhanced_result"] == "https://x/2.jpg"
        assert data["comparison"]["winner"] == "image2"
        assert data["comparison"]["image1_url"] == "https://x/1.jpg"
        assert data["suggestions"] == ["Warmer light"]


class TestStockPhotoModel:
    """Validate StockPhotoModel.from_photo."""

    def test_from_photo(self):
        """All photo fields are copied."""
        model = StockPhotoModel.from_photo(
            StockPhoto(id=1, url="https://x/1.jpg", alt="Lake", photographer="Ana", photographer_url="https://p/ana")
        )
        assert model.model_dump() == {
            "id": 1,
            "url": "https://x/1.jpg",
            "alt": "Lake",
            "photographer": "Ana",
            "photographer_url": "https://p/ana",
        }
