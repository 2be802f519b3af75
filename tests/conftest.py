"""Fake Places / Geocoding backend served over real HTTP for the service tests."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer


class FakeGoogle:
    @staticmethod
    def make_suggestion(place_id: str, main: str, secondary: Optional[str] = None, types=None) -> Dict[str, Any]:
        structured: Dict[str, Any] = {"mainText": {"text": main}}
        if secondary is not None:
            structured["secondaryText"] = {"text": secondary}
        prediction: Dict[str, Any] = {"placeId": place_id, "structuredFormat": structured}
        if types is not None:
            prediction["types"] = types
        return {"placePrediction": prediction}

    def __init__(self) -> None:
        self.autocomplete_requests: List[Dict[str, Any]] = []
        self.geocode_requests: List[Dict[str, Any]] = []
        self.suggestions: List[Dict[str, Any]] = []
        self.autocomplete_status = 200
        self.omit_suggestions = False
        self.html_body = ""
        # address -> (lat, lng) | None (no result) | int (HTTP status to fail with)
        self.locations: Dict[str, Any] = {}
        # address -> seconds to wait before answering
        self.geocode_delays: Dict[str, float] = {}
        self.autocomplete_delay = 0.0
        self.base_url = ""

    @property
    def autocomp_url(self) -> str:
        return f"{self.base_url}/autocomplete"

    @property
    def geocoding_url(self) -> str:
        return f"{self.base_url}/geocode"

    async def _autocomplete(self, request: web.Request) -> web.Response:
        self.autocomplete_requests.append(
            {
                "params": dict(request.query),
                "headers": request.headers.copy(),
                "json": await request.json(),
            }
        )
        if self.autocomplete_delay:
            await asyncio.sleep(self.autocomplete_delay)
        if self.autocomplete_status != 200:
            return web.json_response({"error": {"message": "denied"}}, status=self.autocomplete_status)
        if self.html_body:
            return web.Response(status=200, text=self.html_body, content_type="text/html")
        if self.omit_suggestions:
            return web.json_response({})
        return web.json_response({"suggestions": self.suggestions})

    async def _geocode(self, request: web.Request) -> web.Response:
        address = request.query.get("address", "")
        self.geocode_requests.append(dict(request.query))
        delay = self.geocode_delays.get(address)
        if delay:
            await asyncio.sleep(delay)

        location = self.locations.get(address)
        if isinstance(location, int):
            return web.Response(status=location, text="boom")
        if location is None:
            return web.json_response({"results": [], "status": "ZERO_RESULTS"})
        lat, lng = location
        return web.json_response(
            {"results": [{"geometry": {"location": {"lat": lat, "lng": lng}}}], "status": "OK"}
        )

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/autocomplete", self._autocomplete)
        app.router.add_get("/geocode", self._geocode)
        return app


@pytest_asyncio.fixture
async def google():
    fake = FakeGoogle()
    server = TestServer(fake.make_app())
    await server.start_server()
    fake.base_url = str(server.make_url("/")).rstrip("/")
    try:
        yield fake
    finally:
        await server.close()


@pytest_asyncio.fixture
async def session():
    async with aiohttp.ClientSession() as s:
        yield s
