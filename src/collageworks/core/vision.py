"""Multimodal model calls: comparison judgment and improvement suggestions.

Both calls go to an OpenAI-compatible chat model with image inputs. Neither
call is allowed to break the operation that triggered it: if the service is
not configured, unreachable, or replies with something that does not decode,
the caller receives the fixed fallback from :mod:`collageworks.core.decoding`
tagged ``ok=False``.
"""

import logging

import openai
from openai import AsyncOpenAI

from .config import CollageworksConfig
from .decoding import ComparisonVerdict, Decoded, decode_suggestions, decode_verdict

logger = logging.getLogger(__name__)

SUGGESTION_PROMPT = """You are reviewing an AI-enhanced collage image.

Suggest exactly three specific, actionable improvements that an image-editing
model could apply to this image in a single edit each. Focus on composition,
lighting, color harmony, and how naturally the elements are blended.

Respond with a strict JSON array of exactly three strings and nothing else, for example:
["first suggestion", "second suggestion", "third suggestion"]"""

JUDGE_PROMPT_TEMPLATE = """You are judging two AI-generated images produced from the same collage and prompt.

Original prompt:
{prompt}

Compare image1 (the first image) and image2 (the second image) for prompt
adherence, visual quality, realism, and how well the collage elements were
integrated. Score each image from 1 to 10.

Respond with a strict JSON object and nothing else:
{{"winner": "image1" or "image2", "reason": "<one or two sentences>", "score1": <1-10>, "score2": <1-10>}}"""


def _image_part(url: str) -> dict:
    return {"type": "image_url", "image_url": {"url": url}}


class VisionAdvisor:
    """Judge comparisons and suggest improvements with a multimodal chat model.

    Args:
        api_key: API key; without one every call returns its fallback.
        model: Chat model name.
        client: Pre-built client (tests inject a mock).
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o",
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self._client = client
        if self._client is None and api_key:
            self._client = AsyncOpenAI(api_key=api_key)
            logger.info(f"Vision advisor configured with model: {model}")
        elif self._client is None:
            logger.warning(
                "Vision advisor unavailable: API key not set. "
                "Comparisons and suggestions will use fallback values."
            )

    @classmethod
    def from_config(cls, cfg: CollageworksConfig) -> "VisionAdvisor":
        return cls(api_key=cfg.openai_api_key, model=cfg.vision_model)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def _complete(self, content: list[dict], max_tokens: int) -> str | None:
        """Send one user message and return the reply text, or ``None`` on failure."""
        if self._client is None:
            return None
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                temperature=0.0,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error(f"Vision model request failed: {e}")
            return None

        if not response.choices:
            logger.warning("Vision model returned no choices")
            return None
        return response.choices[0].message.content

    async def suggest_improvements(self, image_url: str) -> Decoded[list[str]]:
        """Ask for exactly three improvement suggestions for *image_url*."""
        text = await self._complete(
            [{"type": "text", "text": SUGGESTION_PROMPT}, _image_part(image_url)],
            max_tokens=400,
        )
        decoded = decode_suggestions(text)
        logger.info(f"Suggestions ready (from_model={decoded.ok})")
        return decoded

    async def judge(self, image1_url: str, image2_url: str, prompt: str) -> Decoded[ComparisonVerdict]:
        """Pick the better of two candidate images for *prompt*."""
        text = await self._complete(
            [
                {"type": "text", "text": JUDGE_PROMPT_TEMPLATE.format(prompt=prompt)},
                _image_part(image1_url),
                _image_part(image2_url),
            ],
            max_tokens=300,
        )
        decoded = decode_verdict(text)
        logger.info(f"Comparison verdict: {decoded.value.winner} (from_model={decoded.ok})")
        return decoded
