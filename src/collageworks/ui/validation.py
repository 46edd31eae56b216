"""Validation utilities for Collageworks UI inputs."""

import logging

from collageworks.core.session import EMPTY_CANVAS_ERROR, NO_RESULT_ERROR, EditorSession

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """User-friendly validation error.

    The message is intended to be displayed directly to the user.
    """

    pass


def validate_prompt_content(prompt: str, max_length: int = 10000) -> None:
    """Validate prompt text content.

    A blank prompt is allowed: enhancement falls back to the default prompt.

    Raises:
        ValidationError: If the prompt is too long or obviously invalid
    """
    if len(prompt) > max_length:
        raise ValidationError(
            f"Prompt is too long ({len(prompt)} characters). Maximum is {max_length} characters."
        )

    if prompt.strip().lower() in ["error:", "error", "none", "null"]:
        raise ValidationError("Invalid prompt content")


def validate_canvas_ready(session: EditorSession) -> None:
    """Ensure there is something on the canvas to enhance."""
    if len(session.canvas) == 0:
        raise ValidationError(EMPTY_CANVAS_ERROR)


def validate_edit_request(session: EditorSession, instruction: str) -> str:
    """Validate an edit instruction against the current result.

    Returns:
        The stripped instruction

    Raises:
        ValidationError: If there is no result yet or the instruction is blank
    """
    if session.enhanced_result is None:
        raise ValidationError("Please enhance the collage first before editing")
    instruction = (instruction or "").strip()
    if not instruction:
        raise ValidationError("Please describe the edit you want to make")
    validate_prompt_content(instruction)
    return instruction


def validate_suggestion_request(session: EditorSession, suggestion: str | None) -> str:
    """Validate that a suggestion can be applied."""
    if session.enhanced_result is None:
        raise ValidationError(NO_RESULT_ERROR)
    if not suggestion or not suggestion.strip():
        raise ValidationError("Please choose a suggestion to apply")
    return suggestion.strip()
