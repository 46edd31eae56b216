"""Async client for a Replicate-style predictions API.

Only the two calls the orchestrator needs are implemented:

- ``POST {api_url}/models/{owner}/{name}/predictions``: submit a job.
- ``GET {api_url}/predictions/{id}``: refresh its status.

Service statuses are normalised to :class:`~collageworks.core.models.JobStatus`:
``starting`` and ``processing`` are pending, ``succeeded`` is succeeded, and
``failed`` and ``canceled`` are failed.

A successful job is expected to carry a single image URL string as its
``output``. Any other shape is kept as ``result_url=None`` and treated as a
failure by the orchestrator.

Transport errors and non-2xx responses are logged and raised as
:class:`~collageworks.core.errors.GenerationError`. Nothing here retries.
"""

import logging
from typing import Any

import httpx

from .config import CollageworksConfig
from .errors import GenerationError
from .models import GenerationJob, JobStatus

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to generate image"

_FAILED_STATUSES = {"failed", "canceled"}


class PredictionClient:
    """Submit and poll enhancement jobs.

    Args:
        api_token: Bearer token for the service.
        api_url: Base URL, e.g. ``https://api.replicate.com/v1``.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_token: str | None,
        api_url: str = "https://api.replicate.com/v1",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_token = api_token
        self.api_url = api_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._client = httpx.AsyncClient(headers=headers, timeout=timeout, transport=transport)

    @classmethod
    def from_config(
        cls,
        cfg: CollageworksConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PredictionClient":
        return cls(
            api_token=cfg.replicate_api_token,
            api_url=cfg.replicate_api_url,
            timeout=cfg.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _parse(model: str, payload: dict[str, Any]) -> GenerationJob:
        raw_status = payload.get("status")
        output = payload.get("output")

        if raw_status == "succeeded":
            status = JobStatus.SUCCEEDED
        elif raw_status in _FAILED_STATUSES:
            status = JobStatus.FAILED
        else:
            status = JobStatus.PENDING

        return GenerationJob(
            id=str(payload.get("id") or ""),
            model=model,
            status=status,
            result_url=output if status is JobStatus.SUCCEEDED and isinstance(output, str) else None,
            error=payload.get("error"),
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        if not self.api_token:
            logger.error("Prediction API token is not configured")
            raise GenerationError(GENERIC_FAILURE)
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Prediction API request failed ({method} {url}): {e}")
            raise GenerationError(GENERIC_FAILURE) from e
        except ValueError as e:
            logger.error(f"Prediction API returned invalid JSON ({method} {url}): {e}")
            raise GenerationError(GENERIC_FAILURE) from e

        if not isinstance(payload, dict):
            logger.error(f"Prediction API returned unexpected payload: {payload!r}")
            raise GenerationError(GENERIC_FAILURE)
        return payload

    async def create(self, model: str, model_input: dict[str, Any]) -> GenerationJob:
        """Submit a job to *model*.

        Args:
            model: ``owner/name`` model reference.
            model_input: The ``input`` object for the model.

        Returns:
            The job as reported by the submission response.
        """
        payload = await self._request(
            "POST",
            f"{self.api_url}/models/{model}/predictions",
            json={"input": model_input},
        )
        job = self._parse(model, payload)
        if not job.id:
            logger.error(f"Prediction API response for {model} is missing a job id")
            raise GenerationError(GENERIC_FAILURE)
        logger.info(f"Submitted job {job.id} to {model} (status={job.status.value})")
        return job

    async def get(self, job: GenerationJob) -> GenerationJob:
        """Fetch the current state of *job*."""
        payload = await self._request("GET", f"{self.api_url}/predictions/{job.id}")
        refreshed = self._parse(job.model, payload)
        if not refreshed.id:
            refreshed.id = job.id
        if refreshed.status is not job.status:
            logger.info(f"Job {job.id} is now {refreshed.status.value}")
        return refreshed
