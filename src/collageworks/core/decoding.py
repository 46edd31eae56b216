"""Decoders for the two model-written JSON payloads.

Both the comparison judge and the suggestion analyst are asked for strict
JSON. Their replies are decoded into a :class:`Decoded` value instead of
raising: a reply that does not conform yields the fixed fallback with
``ok=False``, so callers always get something usable without a try/except.

Accepted shapes
---------------
Suggestions
    A JSON array of exactly three strings.
Verdict
    ``{"winner": "image1"|"image2", "reason": str, "score1": 1-10, "score2": 1-10}``

A single surrounding Markdown code fence (```` ```json ... ``` ````) is
tolerated because chat models add one even when told not to.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_SUGGESTIONS: tuple[str, str, str] = (
    "Improve the lighting so every element shares one consistent light source",
    "Blend the edges of pasted elements so they sit naturally in the scene",
    "Increase color harmony and contrast for a more polished finish",
)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """A decoded value tagged with whether it came from the model or the fallback."""

    value: T
    ok: bool


class ComparisonVerdict(BaseModel):
    """Judge verdict on two candidate images."""

    winner: Literal["image1", "image2"]
    reason: str
    score1: int = Field(ge=1, le=10)
    score2: int = Field(ge=1, le=10)


FALLBACK_VERDICT = ComparisonVerdict(
    winner="image1",
    reason="Automatic comparison was unavailable, so the first image was selected by default.",
    score1=7,
    score2=6,
)


def strip_code_fence(text: str) -> str:
    """Remove one surrounding Markdown code fence, if present."""
    stripped = text.strip()
    match = _CODE_FENCE.match(stripped)
    return match.group(1) if match else stripped


def decode_suggestions(text: str | None) -> Decoded[list[str]]:
    """Decode a suggestion reply into exactly three strings.

    Args:
        text: Raw model reply.

    Returns:
        The three suggestions with ``ok=True``, or the fallback triple with
        ``ok=False``.
    """
    if text:
        try:
            payload = json.loads(strip_code_fence(text))
        except json.JSONDecodeError as e:
            logger.warning(f"Suggestion reply is not valid JSON: {e}")
        else:
            if (
                isinstance(payload, list)
                and len(payload) == 3
                and all(isinstance(item, str) for item in payload)
            ):
                return Decoded(value=list(payload), ok=True)
            logger.warning("Suggestion reply is not an array of exactly three strings")

    return Decoded(value=list(FALLBACK_SUGGESTIONS), ok=False)


def decode_verdict(text: str | None) -> Decoded[ComparisonVerdict]:
    """Decode a judge reply into a :class:`ComparisonVerdict`.

    Args:
        text: Raw model reply.

    Returns:
        The verdict with ``ok=True``, or :data:`FALLBACK_VERDICT` with ``ok=False``.
    """
    if text:
        try:
            verdict = ComparisonVerdict.model_validate_json(strip_code_fence(text))
        except ValidationError as e:
            logger.warning(f"Comparison reply did not match the verdict schema: {e}")
        else:
            return Decoded(value=verdict, ok=True)

    return Decoded(value=FALLBACK_VERDICT, ok=False)
