"""Shared pytest fixtures for Collageworks tests."""

import io
import random
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from collageworks.core.canvas import Canvas
from collageworks.core.config import CollageworksConfig
from collageworks.core.decoding import ComparisonVerdict, Decoded
from collageworks.core.models import EnhancementOutcome, GenerationJob, JobStatus
from collageworks.core.session import EditorSession
from collageworks.core.stock_search import PexelsClient
from collageworks.ui.models import UIState


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> CollageworksConfig:
    """Create a test configuration with a temporary static directory.

    Polling is instant, the prediction token and Pexels key are set, and the
    vision model is unconfigured.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        CollageworksConfig instance for testing
    """
    static_dir = temp_dir / "public"
    static_dir.mkdir()

    return CollageworksConfig(
        replicate_api_token="test-token",
        openai_api_key=None,
        pexels_api_key="pexels-key",
        poll_interval=0.0,
        static_dir=static_dir,
        _env_file=None,
    )


@pytest.fixture
def make_image() -> Callable[..., Image.Image]:
    """Factory for solid-color RGB test images."""

    def _make(width: int = 400, height: int = 300, color: str = "red") -> Image.Image:
        return Image.new("RGB", (width, height), color)

    return _make


@pytest.fixture
def png_bytes(make_image) -> bytes:
    """A 400x300 red PNG."""
    buffer = io.BytesIO()
    make_image().save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def canvas() -> Canvas:
    """Empty 800x600 canvas with a seeded placement RNG."""
    return Canvas(rng=random.Random(1234))


@pytest.fixture
def session(canvas: Canvas) -> EditorSession:
    """Editor session over the empty canvas fixture."""
    return EditorSession(canvas=canvas)


@pytest.fixture
def layered_session(session: EditorSession, make_image) -> EditorSession:
    """Session with one 200x150 layer at (100, 100), id ``a``, selected."""
    session.canvas.add_layer(make_image(400, 300), "a.png", x=100, y=100, layer_id="a")
    session.select("a")
    return session


def job(
    model: str,
    status: JobStatus = JobStatus.PENDING,
    result_url: str | None = None,
    job_id: str | None = None,
) -> GenerationJob:
    """Build a GenerationJob for scripted prediction doubles."""
    return GenerationJob(
        id=job_id or f"job-{model.rsplit('/', 1)[-1]}",
        model=model,
        status=status,
        result_url=result_url,
    )


class ScriptedPredictions:
    """Prediction client double that replays a script of job states per model.

    Each script entry is the job returned by the next ``create``/``get`` call
    for that model, or an exception to raise instead.
    """

    def __init__(self, scripts: dict):
        self.scripts = {model: list(steps) for model, steps in scripts.items()}
        self.created: list[tuple[str, dict]] = []
        self.polled: list[str] = []
        self.closed = False

    def _next(self, model: str) -> GenerationJob:
        step = self.scripts[model].pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    async def create(self, model: str, model_input: dict) -> GenerationJob:
        self.created.append((model, model_input))
        return self._next(model)

    async def get(self, current: GenerationJob) -> GenerationJob:
        self.polled.append(current.id)
        return self._next(current.model)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def make_job() -> Callable[..., GenerationJob]:
    """Factory for GenerationJob values."""
    return job


@pytest.fixture
def scripted_predictions() -> type[ScriptedPredictions]:
    """The ScriptedPredictions double, for building per-test scripts."""
    return ScriptedPredictions


@pytest.fixture
def mock_advisor() -> Mock:
    """Vision advisor double with model-sourced answers."""
    advisor = Mock()
    advisor.is_available = True
    advisor.suggest_improvements = AsyncMock(
        return_value=Decoded(value=["Warmer light", "Softer edges", "More contrast"], ok=True)
    )
    advisor.judge = AsyncMock(
        return_value=Decoded(
            value=ComparisonVerdict(winner="image2", reason="Sharper details", score1=6, score2=9),
            ok=True,
        )
    )
    advisor.aclose = AsyncMock()
    return advisor


@pytest.fixture
def ui_state(session: EditorSession) -> UIState:
    """UI state with a real session and mocked service clients.

    Returns:
        UIState instance that initialize_ui_state leaves untouched
    """
    orchestrator = Mock()
    orchestrator.enhance_collage = AsyncMock()
    orchestrator.edit = AsyncMock()
    orchestrator.apply_suggestion = AsyncMock()
    orchestrator.aclose = AsyncMock()

    stock_client = Mock()
    stock_client.search = AsyncMock(return_value=[])
    stock_client.fetch_image = AsyncMock()
    stock_client.aclose = AsyncMock()

    http_client = Mock()
    http_client.aclose = AsyncMock()

    return UIState(
        session=session,
        orchestrator=orchestrator,
        stock_client=stock_client,
        http_client=http_client,
    )


# ---------------------------------------------------------------------------
# API fixtures.
# ---------------------------------------------------------------------------

PEXELS_PAYLOAD = {
    "photos": [
        {
            "id": 101,
            "alt": "Snowy mountains",
            "photographer": "Ana",
            "photographer_url": "https://www.pexels.com/@ana",
            "src": {"medium": "https://images.pexels.test/101-medium.jpg"},
        }
    ]
}


def _pexels_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/search"):
        return httpx.Response(200, json=PEXELS_PAYLOAD)
    return httpx.Response(404)


@pytest.fixture
def fake_orchestrator() -> Mock:
    """Orchestrator double with canned enhancement, edit and suggestion results."""
    orchestrator = Mock()
    orchestrator.enhance_collage = AsyncMock(
        return_value=EnhancementOutcome(
            image_url="https://x/out.jpg",
            suggestions=["Warmer light", "Softer edges", "More contrast"],
            suggestions_from_model=True,
        )
    )
    orchestrator.edit = AsyncMock(return_value="https://x/edited.jpg")
    orchestrator.apply_suggestion = AsyncMock(return_value="https://x/suggested.jpg")
    orchestrator.aclose = AsyncMock()
    orchestrator.advisor.is_available = False
    return orchestrator


@pytest.fixture
def test_client(test_config, fake_orchestrator) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with a mocked orchestrator and a mock Pexels transport.

    Yields:
        TestClient bound to the Collageworks app
    """
    from collageworks.api import main as api_main

    stock = PexelsClient(
        api_key=test_config.pexels_api_key,
        api_url="https://api.pexels.test/v1",
        transport=httpx.MockTransport(_pexels_handler),
    )

    with patch.object(api_main, "config", test_config), \
         patch.object(api_main.GenerationOrchestrator, "from_config", return_value=fake_orchestrator), \
         patch.object(api_main.PexelsClient, "from_config", return_value=stock):
        with TestClient(api_main.app) as client:
            yield client
