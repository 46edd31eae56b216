"""Data models for enhancement jobs, comparisons and stock photos."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

Winner = Literal["image1", "image2"]


class JobStatus(str, Enum):
    """Lifecycle of an external enhancement job."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class GenerationJob:
    """One external prediction, as last seen by a status poll.

    Attributes:
        id: Job id assigned by the prediction service (empty if submission failed).
        model: Model reference the job was submitted to.
        status: Normalised status.
        result_url: Image reference on success (URL or data URI).
        error: Failure detail reported by the service, for logs only.
    """

    id: str
    model: str
    status: JobStatus = JobStatus.PENDING
    result_url: str | None = None
    error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is JobStatus.PENDING

    @property
    def succeeded(self) -> bool:
        return self.status is JobStatus.SUCCEEDED and self.result_url is not None


@dataclass
class ComparisonResult:
    """Outcome of an A/B comparison between two enhancement backends.

    Scores are 1-10 when they come from the judge. When only one job
    succeeded the failed side scores 0.
    """

    winner: Winner
    reason: str
    score1: int
    score2: int
    image1_url: str | None = None
    image2_url: str | None = None

    @property
    def winner_url(self) -> str | None:
        return self.image1_url if self.winner == "image1" else self.image2_url


@dataclass
class EnhancementOutcome:
    """Result of enhancing a collage: the winning image plus follow-up suggestions."""

    image_url: str
    comparison: ComparisonResult | None = None
    suggestions: list[str] = field(default_factory=list)
    suggestions_from_model: bool = False


@dataclass(frozen=True)
class StockPhoto:
    """A stock photo search hit."""

    id: int | str
    url: str
    alt: str = ""
    photographer: str = ""
    photographer_url: str = ""
