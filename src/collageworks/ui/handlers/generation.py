"""Enhancement, edit and suggestion handlers."""

import logging

import gradio as gr

from collageworks.core.errors import SessionBusyError
from collageworks.core.models import ComparisonResult

from ..models import UIState
from ..state import initialize_ui_state
from ..validation import (
    ValidationError,
    validate_canvas_ready,
    validate_edit_request,
    validate_prompt_content,
    validate_suggestion_request,
)

logger = logging.getLogger(__name__)


def format_comparison(comparison: ComparisonResult | None) -> str:
    """Render a comparison record as Markdown."""
    if comparison is None:
        return ""
    return (
        f"### ⚖️ Model comparison\n\n"
        f"**Winner:** {comparison.winner}  \n"
        f"**Scores:** image1 {comparison.score1}/10, image2 {comparison.score2}/10\n\n"
        f"{comparison.reason}"
    )


def _error_message(title: str, message: str) -> str:
    return f"❌ **{title}**\n\n{message}"


async def enhance_collage(
    prompt: str, compare: bool, state: UIState
) -> tuple[str | None, str, dict, str, UIState]:
    """Enhance the current collage from the UI.

    Args:
        prompt: Enhancement prompt (blank uses the default prompt)
        compare: Run both models and keep the judged winner
        state: UI state

    Returns:
        Tuple of (result_image, comparison_md, suggestions_update, status_md, updated_state)
    """
    state = initialize_ui_state(state)
    session = state.session
    try:
        validate_canvas_ready(session)
        validate_prompt_content(prompt or "")

        outcome = await session.run_enhancement(state.orchestrator, prompt or "", compare=compare)
        if outcome is None:
            return (
                None,
                "",
                gr.update(choices=[], value=None),
                _error_message("Enhancement Failed", session.error or "Unknown error"),
                state,
            )

        status = "✅ Collage enhanced"
        if not outcome.suggestions_from_model:
            status += "\n\n*Suggestions are generic: image analysis was unavailable.*"
        return (
            outcome.image_url,
            format_comparison(outcome.comparison),
            gr.update(choices=outcome.suggestions, value=None),
            status,
            state,
        )

    except (ValidationError, SessionBusyError) as e:
        logger.warning(f"Enhancement rejected: {e}")
        return (
            session.enhanced_result,
            format_comparison(session.comparison),
            gr.update(),
            f"⚠️ {e}",
            state,
        )


async def edit_result(instruction: str, state: UIState) -> tuple[str | None, dict, str, UIState]:
    """Refine the latest result with a free-text instruction.

    Returns:
        Tuple of (result_image, edit_textbox_update, status_md, updated_state)
    """
    state = initialize_ui_state(state)
    session = state.session
    try:
        instruction = validate_edit_request(session, instruction)
        result = await session.run_edit(state.orchestrator, instruction)
        if result is None:
            return (
                session.enhanced_result,
                gr.update(),
                _error_message("Edit Failed", session.error or "Unknown error"),
                state,
            )
        return result, gr.update(value=""), "✅ Edit applied", state

    except (ValidationError, SessionBusyError) as e:
        logger.warning(f"Edit rejected: {e}")
        return session.enhanced_result, gr.update(), f"⚠️ {e}", state


async def apply_suggestion(suggestion: str | None, state: UIState) -> tuple[str | None, dict, str, UIState]:
    """Apply the chosen improvement suggestion to the latest result.

    Returns:
        Tuple of (result_image, edit_textbox_update, status_md, updated_state)
    """
    state = initialize_ui_state(state)
    session = state.session
    try:
        suggestion = validate_suggestion_request(session, suggestion)
        result = await session.run_suggestion(state.orchestrator, suggestion)
        if result is None:
            return (
                session.enhanced_result,
                gr.update(),
                _error_message("Suggestion Failed", session.error or "Unknown error"),
                state,
            )
        return result, gr.update(value=""), f"✅ Applied: {suggestion}", state

    except (ValidationError, SessionBusyError) as e:
        logger.warning(f"Suggestion rejected: {e}")
        return session.enhanced_result, gr.update(), f"⚠️ {e}", state
