"""Unit tests for UI state management."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from collageworks.core.session import EditorSession
from collageworks.ui.models import UIState
from collageworks.ui.state import cleanup_ui_state, initialize_ui_state


class TestUIState:
    """Tests for the UIState model."""

    def test_new_state_is_not_initialized(self):
        """Test that a fresh UIState reports not initialized."""
        assert UIState().is_initialized() is False

    def test_repr_counts_layers(self, ui_state, make_image):
        """Test that repr reports layer and stock result counts."""
        ui_state.session.add_image(make_image(), "a.png")
        assert "layers=1" in repr(ui_state)
        assert "stock_results=0" in repr(ui_state)


class TestInitializeUIState:
    """Tests for initialize_ui_state function."""

    def test_initialize_none_creates_new_state(self, test_config):
        """Test that passing None creates a fully initialized UIState."""
        with patch("collageworks.ui.state.GenerationOrchestrator") as MockOrch, \
             patch("collageworks.ui.state.PexelsClient") as MockPexels, \
             patch("collageworks.ui.state.httpx.AsyncClient") as MockHttp:

            result = initialize_ui_state(None, test_config)

            assert isinstance(result, UIState)
            assert isinstance(result.session, EditorSession)
            assert result.orchestrator is MockOrch.from_config.return_value
            assert result.stock_client is MockPexels.from_config.return_value
            assert result.http_client is MockHttp.return_value
            MockOrch.from_config.assert_called_once_with(test_config)

    def test_session_uses_configured_canvas(self, test_config):
        """Test that the new session's canvas follows the configuration."""
        cfg = test_config.model_copy(update={"canvas_width": 640, "canvas_height": 480, "layer_max_size": 120})
        with patch("collageworks.ui.state.GenerationOrchestrator"), \
             patch("collageworks.ui.state.PexelsClient"), \
             patch("collageworks.ui.state.httpx.AsyncClient"):

            result = initialize_ui_state(UIState(), cfg)

        assert (result.session.canvas.width, result.session.canvas.height) == (640, 480)
        assert result.session.canvas.layer_max_size == 120

    def test_ui_does_not_need_the_api_package(self):
        """Test that UI state builds sessions from core alone."""
        import collageworks.ui.state as ui_state_module

        assert not hasattr(ui_state_module, "SessionStore")

    def test_initialize_returns_if_already_initialized(self, ui_state):
        """Test that already initialized state is returned as-is."""
        session = ui_state.session
        orchestrator = ui_state.orchestrator

        with patch("collageworks.ui.state.GenerationOrchestrator") as MockOrch:
            result = initialize_ui_state(ui_state)

        assert result is ui_state
        assert result.session is session
        assert result.orchestrator is orchestrator
        MockOrch.from_config.assert_not_called()

    def test_missing_components_are_filled_in(self, ui_state, test_config):
        """Test that only missing components are created."""
        ui_state.stock_client = None
        existing_session = ui_state.session

        with patch("collageworks.ui.state.PexelsClient") as MockPexels:
            result = initialize_ui_state(ui_state, test_config)

        assert result.session is existing_session
        assert result.stock_client is MockPexels.from_config.return_value


class TestCleanupUIState:
    """Tests for cleanup_ui_state function."""

    @pytest.mark.asyncio
    async def test_cleanup_closes_clients(self, ui_state):
        """Test that every client is closed and the state is emptied."""
        orchestrator = ui_state.orchestrator
        stock_client = ui_state.stock_client
        http_client = ui_state.http_client

        await cleanup_ui_state(ui_state)

        orchestrator.aclose.assert_awaited_once()
        stock_client.aclose.assert_awaited_once()
        http_client.aclose.assert_awaited_once()
        assert ui_state.session is None
        assert ui_state.is_initialized() is False

    @pytest.mark.asyncio
    async def test_cleanup_of_empty_state(self):
        """Test that cleaning an uninitialized state is harmless."""
        state = UIState()
        await cleanup_ui_state(state)
        assert state.orchestrator is None

    @pytest.mark.asyncio
    async def test_cleanup_clears_stock_results(self, ui_state):
        """Test that cached stock results are dropped."""
        ui_state.stock_results.append(Mock())
        ui_state.http_client.aclose = AsyncMock()
        await cleanup_ui_state(ui_state)
        assert ui_state.stock_results == []
