from __future__ import annotations

from contextlib import asynccontextmanager
from typing import List

import aiohttp
from fastapi import FastAPI, HTTPException, Query, Request

from places_autocomplete.config import get_settings
from places_autocomplete.logging import configure_logging, logger
from places_autocomplete.models import OrchestratorState, Place, QueryRequest
from places_autocomplete.services.orchestrator import QueryOrchestrator

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Raises ConfigurationError (missing key, empty language) and aborts startup.
    orchestrator = QueryOrchestrator.from_settings(get_settings())
    app.state.orchestrator = orchestrator
    logger.info("orchestrator.ready", language=orchestrator.language, countries=orchestrator.countries)
    try:
        yield
    finally:
        await orchestrator.aclose()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Debounced place autocomplete with geocoded suggestions (Google Places + Geocoding).",
    lifespan=lifespan,
)


def _orchestrator(request: Request) -> QueryOrchestrator:
    return request.app.state.orchestrator


@app.get("/", tags=["Root"])
async def root():
    return {"ok": True, "service": settings.app_name, "version": settings.version}


@app.get("/health", tags=["Healthcheck"])
async def health():
    return {"ok": True}


@app.get("/api/state", response_model=OrchestratorState, tags=["Api State"])
async def api_state(request: Request):
    return _orchestrator(request).state


@app.put("/api/query", response_model=OrchestratorState, tags=["Api State"])
async def api_query(req: QueryRequest, request: Request):
    orchestrator = _orchestrator(request)
    orchestrator.set_query(req.query)
    return orchestrator.state


@app.get("/api/places", response_model=List[Place], tags=["Api Places"])
async def api_places(
    request: Request,
    q: str = Query(..., min_length=1, description="Free-text place query"),
):
    """One-shot lookup: no debounce, does not touch the shared state."""
    try:
        return await _orchestrator(request).search(q)
    except aiohttp.ContentTypeError as e:
        raise HTTPException(status_code=502, detail=f"Autocomplete returned an invalid body: {e.message}")
    except aiohttp.ClientResponseError as e:
        raise HTTPException(status_code=502, detail=f"Autocomplete error: {e.status}")
    except aiohttp.ClientError as e:
        raise HTTPException(status_code=502, detail=f"Autocomplete unreachable: {e}")
