"""Drive enhancement jobs to completion and pick a single result image.

Paths
-----
Single job (:meth:`GenerationOrchestrator.enhance`)
    Submit the source image and prompt to the primary model, then poll every
    ``poll_interval`` seconds until the job is succeeded or failed. Success
    must carry one image URL string.

Comparison (:meth:`GenerationOrchestrator.compare`)
    Submit the same input to the primary and secondary models at once. Each
    tick polls every job that is still pending, until both are terminal.

    =================  ====================================================
    Outcome            Result
    =================  ====================================================
    both failed        :class:`GenerationError`
    one succeeded      that image wins; synthetic record, scores 0 vs 8
    both succeeded     the vision judge decides; fallback verdict on failure
    =================  ====================================================

Edit / suggestion (:meth:`edit`, :meth:`apply_suggestion`)
    The single-job path, fed the previous result as the new input. Only the
    latest result is kept by callers; chains are unbounded.

Polling has no timeout, no attempt limit and no cancellation. A job that
never reaches a terminal status keeps the caller waiting.
"""

import asyncio
import logging
from typing import Any

from .canvas import Canvas
from .config import CollageworksConfig
from .config import config as default_config
from .errors import GenerationError
from .models import ComparisonResult, EnhancementOutcome, GenerationJob, JobStatus
from .prediction import GENERIC_FAILURE, PredictionClient
from .rendering import snapshot_data_uri
from .sources import resolve_image_source
from .vision import VisionAdvisor

logger = logging.getLogger(__name__)

DEFAULT_ENHANCEMENT_PROMPT = (
    "Transform this collage into a professional, high-quality digital asset with enhanced "
    "colors, perfect lighting, crisp details, and polished composition. Make it look like a "
    "premium marketing material with vibrant colors and studio-quality finish. Many components "
    "will be poorly pasted by the user, so use the collage as a base. If things have a background "
    "there is more chance that they were pasted by the user, so make sure to use the collage as "
    "a base and enhance it."
)

SUGGESTION_EDIT_TEMPLATE = (
    'Apply this specific improvement to the image: "{suggestion}". Make precise adjustments '
    "while maintaining the overall quality and composition of the professional asset."
)

ONE_SIDED_WINNER_SCORE = 8
FAILED_SIDE_SCORE = 0


def one_sided_comparison(winner_job: GenerationJob, winner: str, other: str) -> ComparisonResult:
    """Build the synthetic comparison record used when only one job succeeded."""
    image1_url = winner_job.result_url if winner == "image1" else None
    image2_url = winner_job.result_url if winner == "image2" else None
    winner_score, loser_score = ONE_SIDED_WINNER_SCORE, FAILED_SIDE_SCORE
    return ComparisonResult(
        winner=winner,
        reason=f"Only {winner} succeeded; {other} failed to generate.",
        score1=winner_score if winner == "image1" else loser_score,
        score2=winner_score if winner == "image2" else loser_score,
        image1_url=image1_url,
        image2_url=image2_url,
    )


class GenerationOrchestrator:
    """Run enhancement, comparison and edit flows against external services.

    Args:
        predictions: Client for the prediction service.
        advisor: Vision model used for judging and suggestions.
        cfg: Configuration (models, poll interval, static dir).
    """

    def __init__(
        self,
        predictions: PredictionClient,
        advisor: VisionAdvisor,
        cfg: CollageworksConfig | None = None,
    ) -> None:
        self.predictions = predictions
        self.advisor = advisor
        self.config = cfg or default_config

    @classmethod
    def from_config(cls, cfg: CollageworksConfig) -> "GenerationOrchestrator":
        return cls(PredictionClient.from_config(cfg), VisionAdvisor.from_config(cfg), cfg)

    async def aclose(self) -> None:
        await self.predictions.aclose()
        await self.advisor.aclose()

    # ------------------------------------------------------------------
    # Job plumbing
    # ------------------------------------------------------------------

    def build_input(self, image: str, prompt: str) -> dict[str, Any]:
        """Build the model input for an enhancement job."""
        return {
            "prompt": prompt,
            "input_image": image,
            "aspect_ratio": "match_input_image",
            "output_format": self.config.output_format,
            "safety_tolerance": self.config.safety_tolerance,
        }

    async def _wait(self, job: GenerationJob) -> GenerationJob:
        while job.is_pending:
            await asyncio.sleep(self.config.poll_interval)
            job = await self.predictions.get(job)
        return job

    async def _submit_or_fail(self, model: str, model_input: dict[str, Any]) -> GenerationJob:
        try:
            return await self.predictions.create(model, model_input)
        except GenerationError as e:
            logger.warning(f"Submission to {model} failed: {e}")
            return GenerationJob(id="", model=model, status=JobStatus.FAILED, error=str(e))

    async def _refresh_or_fail(self, job: GenerationJob) -> GenerationJob:
        if not job.is_pending:
            return job
        try:
            return await self.predictions.get(job)
        except GenerationError as e:
            logger.warning(f"Status check for job {job.id} failed: {e}")
            return GenerationJob(id=job.id, model=job.model, status=JobStatus.FAILED, error=str(e))

    # ------------------------------------------------------------------
    # Single job
    # ------------------------------------------------------------------

    async def enhance(self, source: str, prompt: str, model: str | None = None) -> str:
        """Run one enhancement job and return its image URL.

        Args:
            source: URL, data URI, site-relative path or local path.
            prompt: Instruction for the model.
            model: Model reference; defaults to the primary model.

        Raises:
            SourceResolutionError: If *source* cannot be read.
            GenerationError: If the job fails or returns no image URL.
        """
        image = resolve_image_source(source, self.config.static_dir)
        model = model or self.config.primary_model

        job = await self.predictions.create(model, self.build_input(image, prompt))
        job = await self._wait(job)

        if job.status is JobStatus.FAILED:
            logger.error(f"Job {job.id} failed: {job.error or 'Unknown error'}")
            raise GenerationError(GENERIC_FAILURE)
        if job.result_url is None:
            logger.error(f"Job {job.id} succeeded without a single image URL output")
            raise GenerationError(GENERIC_FAILURE)

        logger.info(f"Job {job.id} produced {job.result_url[:80]}")
        return job.result_url

    async def edit(self, previous_result: str, instruction: str) -> str:
        """Refine a previous result with a free-text instruction."""
        return await self.enhance(previous_result, instruction)

    async def apply_suggestion(self, previous_result: str, suggestion: str) -> str:
        """Apply one improvement suggestion to a previous result."""
        return await self.edit(previous_result, SUGGESTION_EDIT_TEMPLATE.format(suggestion=suggestion))

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    async def compare(self, source: str, prompt: str) -> tuple[str, ComparisonResult]:
        """Run the primary and secondary models side by side and pick a winner.

        Returns:
            ``(winning_image_url, comparison)``

        Raises:
            SourceResolutionError: If *source* cannot be read.
            GenerationError: If both jobs fail.
        """
        image = resolve_image_source(source, self.config.static_dir)
        model_input = self.build_input(image, prompt)

        job1, job2 = await asyncio.gather(
            self._submit_or_fail(self.config.primary_model, model_input),
            self._submit_or_fail(self.config.secondary_model, model_input),
        )

        while job1.is_pending or job2.is_pending:
            await asyncio.sleep(self.config.poll_interval)
            job1, job2 = await asyncio.gather(
                self._refresh_or_fail(job1),
                self._refresh_or_fail(job2),
            )

        ok1, ok2 = job1.succeeded, job2.succeeded
        if not ok1 and not ok2:
            logger.error(
                f"Both comparison jobs failed ({job1.model}: {job1.error}; {job2.model}: {job2.error})"
            )
            raise GenerationError(GENERIC_FAILURE)

        if ok1 and not ok2:
            comparison = one_sided_comparison(job1, "image1", "image2")
        elif ok2 and not ok1:
            comparison = one_sided_comparison(job2, "image2", "image1")
        else:
            verdict = (await self.advisor.judge(job1.result_url, job2.result_url, prompt)).value
            comparison = ComparisonResult(
                winner=verdict.winner,
                reason=verdict.reason,
                score1=verdict.score1,
                score2=verdict.score2,
                image1_url=job1.result_url,
                image2_url=job2.result_url,
            )

        logger.info(f"Comparison winner: {comparison.winner} ({comparison.score1} vs {comparison.score2})")
        return comparison.winner_url, comparison

    # ------------------------------------------------------------------
    # Suggestions and the full collage flow
    # ------------------------------------------------------------------

    async def suggest(self, image_url: str) -> tuple[list[str], bool]:
        """Return three improvement suggestions and whether they came from the model."""
        decoded = await self.advisor.suggest_improvements(image_url)
        return decoded.value, decoded.ok

    async def enhance_collage(
        self,
        canvas: Canvas,
        prompt: str = "",
        compare: bool = False,
    ) -> EnhancementOutcome:
        """Snapshot *canvas*, enhance it, and gather follow-up suggestions.

        A blank *prompt* falls back to :data:`DEFAULT_ENHANCEMENT_PROMPT`.
        Suggestion failures never invalidate the enhancement result.

        Raises:
            ValueError: If the canvas has no layers.
            GenerationError: If enhancement fails.
        """
        if len(canvas) == 0:
            raise ValueError("Add at least one image to the canvas before enhancing")

        prompt = prompt.strip() or DEFAULT_ENHANCEMENT_PROMPT
        snapshot = snapshot_data_uri(canvas)

        comparison = None
        if compare:
            image_url, comparison = await self.compare(snapshot, prompt)
        else:
            image_url = await self.enhance(snapshot, prompt)

        suggestions, from_model = await self.suggest(image_url)
        return EnhancementOutcome(
            image_url=image_url,
            comparison=comparison,
            suggestions=suggestions,
            suggestions_from_model=from_model,
        )
