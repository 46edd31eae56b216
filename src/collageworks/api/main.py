"""Collageworks FastAPI application.

This module defines the FastAPI ``app`` instance, all REST API routes, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Sessions** are held in an in-memory :class:`~collageworks.api.sessions.SessionStore`
  on ``app.state``. Each session owns one canvas and its generation results.
- **Generation** is delegated to a
  :class:`~collageworks.core.orchestrator.GenerationOrchestrator`, which talks
  to the prediction service and the vision model.
- **Stock search** goes through a :class:`~collageworks.core.stock_search.PexelsClient`.
- Every component is built in the lifespan handler and closed on shutdown.

Endpoints
---------
======  ==============================================  ==================================
Method  Path                                            Purpose
======  ==============================================  ==================================
GET     ``/health``                                     Liveness and service configuration
POST    ``/api/sessions``                               Create an empty canvas session
GET     ``/api/sessions/{id}``                          Session state
DELETE  ``/api/sessions/{id}``                          Drop a session
POST    ``/api/sessions/{id}/layers``                   Add an image layer
DELETE  ``/api/sessions/{id}/layers``                   Clear the canvas
PATCH   ``/api/sessions/{id}/layers/{layer_id}``        Set scale / rotation / position
DELETE  ``/api/sessions/{id}/layers/{layer_id}``        Remove a layer
POST    ``/api/sessions/{id}/layers/{layer_id}/order``  Reorder a layer
POST    ``/api/sessions/{id}/layers/{layer_id}/reset``  Reset scale and rotation
POST    ``/api/sessions/{id}/select``                   Select a layer (or none)
POST    ``/api/sessions/{id}/pointer``                  Pointer gesture on the canvas
GET     ``/api/sessions/{id}/canvas.png``               Rendered canvas
POST    ``/api/sessions/{id}/enhance``                  Enhance the collage
POST    ``/api/sessions/{id}/edit``                     Edit the latest result
POST    ``/api/sessions/{id}/suggestions/apply``        Apply one suggestion
GET     ``/api/pexels?query=...``                       Stock photo search
======  ==============================================  ==================================

Errors are returned as ``{"detail": "<message>"}``. A generation request on a
session that is already generating returns 409.

Usage
-----
CLI (installed entry point)::

    collageworks-api

Direct invocation::

    python -m collageworks.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from collageworks import __version__
from collageworks.api.models import (
    AddLayerRequest,
    EditRequest,
    EnhanceRequest,
    OrderRequest,
    PointerRequest,
    SessionResponse,
    StockPhotoModel,
    StockSearchResponse,
    SuggestionRequest,
    TransformRequest,
)
from collageworks.api.sessions import SessionStore
from collageworks.core.config import config
from collageworks.core.errors import (
    LayerNotFoundError,
    SessionBusyError,
    SourceResolutionError,
    StockSearchError,
)
from collageworks.core.orchestrator import GenerationOrchestrator
from collageworks.core.rendering import encode_png, render_canvas
from collageworks.core.session import EMPTY_CANVAS_ERROR, NO_RESULT_ERROR, EditorSession
from collageworks.core.sources import load_layer_image
from collageworks.core.stock_search import PexelsClient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the session store and service clients, and close them on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    app.state.sessions = SessionStore(config)
    app.state.orchestrator = GenerationOrchestrator.from_config(config)
    app.state.stock = PexelsClient.from_config(config)
    app.state.http_client = httpx.AsyncClient(timeout=config.request_timeout)
    logger.info(
        f"Collageworks API ready (primary={config.primary_model}, secondary={config.secondary_model})"
    )

    yield

    # --- Shutdown ----------------------------------------------------------
    await app.state.orchestrator.aclose()
    await app.state.stock.aclose()
    await app.state.http_client.aclose()
    logger.info("Service clients closed on shutdown.")


app = FastAPI(
    title="Collageworks",
    description="Collage editor with AI enhancement, edits and A/B model comparison.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping.
# ---------------------------------------------------------------------------


@app.exception_handler(LayerNotFoundError)
async def _layer_not_found(request: Request, exc: LayerNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(SessionBusyError)
async def _session_busy(request: Request, exc: SessionBusyError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SourceResolutionError)
async def _bad_source(request: Request, exc: SourceResolutionError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StockSearchError)
async def _stock_failed(request: Request, exc: StockSearchError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _session(session_id: str) -> EditorSession:
    session = app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _state(session: EditorSession) -> SessionResponse:
    return SessionResponse.from_session(session)


# ---------------------------------------------------------------------------
# Routes: sessions and layers.
# ---------------------------------------------------------------------------


@app.get("/health")
async def health() -> dict:
    """Report liveness and which external services are configured."""
    return {
        "status": "ok",
        "version": __version__,
        "primary_model": config.primary_model,
        "secondary_model": config.secondary_model,
        "predictions_configured": bool(config.replicate_api_token),
        "vision_configured": app.state.orchestrator.advisor.is_available,
        "stock_configured": bool(config.pexels_api_key),
    }


@app.post("/api/sessions", status_code=201)
async def create_session() -> SessionResponse:
    """Create a session with an empty canvas."""
    return _state(app.state.sessions.create())


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str) -> SessionResponse:
    return _state(_session(session_id))


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    if not app.state.sessions.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True, "deleted": session_id}


@app.post("/api/sessions/{session_id}/layers", status_code=201)
async def add_layer(session_id: str, req: AddLayerRequest) -> SessionResponse:
    """Decode an image and place it on the canvas as the selected top layer.

    Raises:
        HTTPException: 400 if the image cannot be read or decoded.
    """
    session = _session(session_id)
    image = await load_layer_image(req.src, app.state.http_client, config.static_dir)
    layer = session.add_image(image, req.src, x=req.x, y=req.y)
    logger.info(f"Session {session_id}: added layer {layer.id}")
    return _state(session)


@app.delete("/api/sessions/{session_id}/layers")
async def clear_layers(session_id: str) -> SessionResponse:
    """Remove every layer and forget the result, error and suggestions."""
    session = _session(session_id)
    session.clear()
    return _state(session)


@app.patch("/api/sessions/{session_id}/layers/{layer_id}")
async def update_layer(session_id: str, layer_id: str, req: TransformRequest) -> SessionResponse:
    session = _session(session_id)
    session.canvas.set_transform(layer_id, scale=req.scale, rotation=req.rotation)
    if req.x is not None or req.y is not None:
        layer = session.canvas.require(layer_id)
        x = req.x if req.x is not None else layer.x
        y = req.y if req.y is not None else layer.y
        session.canvas.move_layer_to(layer_id, x, y)
    return _state(session)


@app.delete("/api/sessions/{session_id}/layers/{layer_id}")
async def remove_layer(session_id: str, layer_id: str) -> SessionResponse:
    session = _session(session_id)
    if not session.remove_layer(layer_id):
        raise LayerNotFoundError(f"Layer not found: {layer_id}")
    return _state(session)


@app.post("/api/sessions/{session_id}/layers/{layer_id}/order")
async def reorder_layer(session_id: str, layer_id: str, req: OrderRequest) -> SessionResponse:
    """Reorder a layer. Moves past either end of the stack are no-ops."""
    session = _session(session_id)
    session.canvas.require(layer_id)
    session.apply_layer_action(layer_id, req.action)
    return _state(session)


@app.post("/api/sessions/{session_id}/layers/{layer_id}/reset")
async def reset_layer(session_id: str, layer_id: str) -> SessionResponse:
    session = _session(session_id)
    session.canvas.reset_transform(layer_id)
    return _state(session)


@app.post("/api/sessions/{session_id}/select")
async def select_layer(session_id: str, layer_id: str | None = None) -> SessionResponse:
    session = _session(session_id)
    session.select(layer_id)
    return _state(session)


@app.post("/api/sessions/{session_id}/pointer")
async def pointer_event(session_id: str, req: PointerRequest) -> SessionResponse:
    """Feed one pointer event to the session's gesture handling."""
    session = _session(session_id)

    if req.action == "down":
        session.begin_drag(req.x, req.y)
    elif req.action == "move":
        session.update_drag(req.x, req.y)
    elif req.action == "up":
        session.end_drag()
    elif req.action == "double":
        session.double_click(req.x, req.y)
    elif req.action == "context":
        session.open_context_menu(req.x, req.y)
    elif req.action == "outside":
        session.click_outside()
    elif req.action == "menu":
        if req.menu_action is None:
            raise HTTPException(status_code=400, detail="menu_action is required for menu events")
        session.context_action(req.menu_action)

    return _state(session)


@app.get("/api/sessions/{session_id}/canvas.png")
async def canvas_png(session_id: str, chrome: bool = True) -> Response:
    """Render the canvas; ``chrome=false`` omits the selection decorations."""
    session = _session(session_id)
    image = render_canvas(session.canvas, selected_id=session.selected_id if chrome else None)
    return Response(content=encode_png(image), media_type="image/png")


# ---------------------------------------------------------------------------
# Routes: generation.
# ---------------------------------------------------------------------------


@app.post("/api/sessions/{session_id}/enhance")
async def enhance(session_id: str, req: EnhanceRequest) -> SessionResponse:
    """Enhance the collage, optionally comparing two models.

    Raises:
        HTTPException: 400 for an empty canvas, 409 while busy, 502 if
            generation fails.
    """
    session = _session(session_id)
    if len(session.canvas) == 0:
        raise HTTPException(status_code=400, detail=EMPTY_CANVAS_ERROR)

    outcome = await session.run_enhancement(app.state.orchestrator, req.prompt, compare=req.compare)
    if outcome is None:
        raise HTTPException(status_code=502, detail=session.error)
    return _state(session)


@app.post("/api/sessions/{session_id}/edit")
async def edit(session_id: str, req: EditRequest) -> SessionResponse:
    session = _session(session_id)
    if session.enhanced_result is None:
        raise HTTPException(status_code=409, detail="Please enhance the collage first before editing")
    if not req.instruction.strip():
        raise HTTPException(status_code=400, detail="Edit instruction is required")

    result = await session.run_edit(app.state.orchestrator, req.instruction)
    if result is None:
        raise HTTPException(status_code=502, detail=session.error)
    return _state(session)


@app.post("/api/sessions/{session_id}/suggestions/apply")
async def apply_suggestion(session_id: str, req: SuggestionRequest) -> SessionResponse:
    session = _session(session_id)
    if session.enhanced_result is None:
        raise HTTPException(status_code=409, detail=NO_RESULT_ERROR)

    result = await session.run_suggestion(app.state.orchestrator, req.suggestion)
    if result is None:
        raise HTTPException(status_code=502, detail=session.error)
    return _state(session)


# ---------------------------------------------------------------------------
# Routes: stock photos.
# ---------------------------------------------------------------------------


@app.get("/api/pexels")
async def search_pexels(query: str | None = None) -> StockSearchResponse:
    """Search stock photos.

    Raises:
        HTTPException: 400 without a query, 500 if the key is missing or
            Pexels fails.
    """
    photos = await app.state.stock.search(query)
    return StockSearchResponse(photos=[StockPhotoModel.from_photo(photo) for photo in photos])


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~collageworks.core.config.config`
    (``COLLAGEWORKS_SERVER_HOST`` / ``COLLAGEWORKS_SERVER_PORT``).

    This function is registered as the ``collageworks-api`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "collageworks.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
