"""Unit tests for validation utilities."""

import pytest

from collageworks.core.session import EMPTY_CANVAS_ERROR, NO_RESULT_ERROR
from collageworks.ui.validation import (
    ValidationError,
    validate_canvas_ready,
    validate_edit_request,
    validate_prompt_content,
    validate_suggestion_request,
)


class TestValidationError:
    """Tests for ValidationError exception."""

    def test_validation_error_is_exception(self):
        """Test that ValidationError is an Exception."""
        assert issubclass(ValidationError, Exception)

    def test_validation_error_message(self):
        """Test that ValidationError preserves error message."""
        msg = "Custom validation error"
        with pytest.raises(ValidationError, match=msg):
            raise ValidationError(msg)


class TestValidatePromptContent:
    """Tests for validate_prompt_content function."""

    def test_blank_prompt_allowed(self):
        """Test that a blank prompt passes (the default prompt is used)."""
        validate_prompt_content("")  # Should not raise

    def test_normal_prompt_allowed(self):
        """Test that an ordinary prompt passes."""
        validate_prompt_content("A sunny beach with palm trees")

    def test_too_long_prompt_rejected(self):
        """Test that prompts over the limit are rejected."""
        with pytest.raises(ValidationError, match="too long"):
            validate_prompt_content("x" * 11, max_length=10)

    @pytest.mark.parametrize("prompt", ["error", "ERROR:", "none", " null "])
    def test_placeholder_values_rejected(self, prompt):
        """Test that placeholder-looking prompts are rejected."""
        with pytest.raises(ValidationError, match="Invalid prompt"):
            validate_prompt_content(prompt)


class TestValidateCanvasReady:
    """Tests for validate_canvas_ready function."""

    def test_empty_canvas_rejected(self, session):
        """Test that an empty canvas cannot be enhanced."""
        with pytest.raises(ValidationError, match=EMPTY_CANVAS_ERROR):
            validate_canvas_ready(session)

    def test_canvas_with_layer_passes(self, layered_session):
        """Test that one layer is enough."""
        validate_canvas_ready(layered_session)


class TestValidateEditRequest:
    """Tests for validate_edit_request function."""

    def test_requires_result(self, layered_session):
        """Test that editing needs an enhanced result."""
        with pytest.raises(ValidationError, match="enhance the collage first"):
            validate_edit_request(layered_session, "darker sky")

    def test_blank_instruction_rejected(self, layered_session):
        """Test that a blank instruction is rejected."""
        layered_session.enhanced_result = "https://x/out.jpg"
        with pytest.raises(ValidationError, match="describe the edit"):
            validate_edit_request(layered_session, "   ")

    def test_instruction_is_stripped(self, layered_session):
        """Test that the returned instruction is stripped."""
        layered_session.enhanced_result = "https://x/out.jpg"
        assert validate_edit_request(layered_session, "  darker sky \n") == "darker sky"


class TestValidateSuggestionRequest:
    """Tests for validate_suggestion_request function."""

    def test_requires_result(self, layered_session):
        """Test that suggestions need an enhanced result."""
        with pytest.raises(ValidationError) as exc_info:
            validate_suggestion_request(layered_session, "Warmer light")
        assert str(exc_info.value) == NO_RESULT_ERROR

    def test_requires_choice(self, layered_session):
        """Test that a suggestion must be chosen."""
        layered_session.enhanced_result = "https://x/out.jpg"
        with pytest.raises(ValidationError, match="choose a suggestion"):
            validate_suggestion_request(layered_session, None)

    def test_valid_suggestion(self, layered_session):
        """Test that a chosen suggestion is returned stripped."""
        layered_session.enhanced_result = "https://x/out.jpg"
        assert validate_suggestion_request(layered_session, " Warmer light ") == "Warmer light"
