from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence

import aiohttp
import structlog

from places_autocomplete.models import Geocode, Place, Suggestion

logger = structlog.get_logger(__name__)


async def autocomplete(
    session: aiohttp.ClientSession,
    query: str,
    *,
    api_key: str,
    url: str,
    language: str,
    countries: Sequence[str] = (),
    timeout_s: float = 20.0,
) -> List[Dict[str, Any]]:
    """Ask the Places API (v1) for suggestions. Returns the raw suggestion payloads.

    Non-2xx responses raise ``aiohttp.ClientResponseError``.
    """
    body: Dict[str, Any] = {"input": query, "languageCode": language}
    if countries:
        body["includedRegionCodes"] = list(countries)

    params = {"input": query, "languageCode": language}
    headers = {"Content-Type": "application/json", "X-Goog-Api-Key": api_key}
    timeout = aiohttp.ClientTimeout(total=timeout_s)

    async with session.post(url, params=params, json=body, headers=headers, timeout=timeout) as resp:
        resp.raise_for_status()
        data = await resp.json()

    return list((data or {}).get("suggestions") or [])


async def geocode(
    session: aiohttp.ClientSession,
    address: str,
    *,
    api_key: str,
    url: str,
    timeout_s: float = 20.0,
) -> Geocode:
    """Geocode one address. Never raises: any failure yields null coordinates."""
    params = {"address": address, "key": api_key}
    timeout = aiohttp.ClientTimeout(total=timeout_s)

    try:
        async with session.get(url, params=params, timeout=timeout) as resp:
            resp.raise_for_status()
            data = await resp.json()

        results = data.get("results") or []
        if not results:
            return Geocode()
        location = results[0]["geometry"]["location"]
        return Geocode(lat=location.get("lat"), lng=location.get("lng"))
    except Exception as exc:
        logger.warning("geocode.failed", address=address, error=repr(exc))
        return Geocode()


def build_place(raw: Dict[str, Any], suggestion: Suggestion, location: Geocode) -> Place:
    prediction = suggestion.place_prediction
    return Place(
        id=prediction.place_id,
        name=suggestion.main_text,
        full_address=suggestion.full_address,
        types=list(prediction.types),
        latitude=location.lat,
        longitude=location.lng,
        raw=raw,
        address_components=prediction.structured_format,
    )


async def fetch_places(
    session: aiohttp.ClientSession,
    query: str,
    *,
    api_key: str,
    autocomp_url: str,
    geocoding_url: str,
    language: str,
    countries: Sequence[str] = (),
    timeout_s: float = 20.0,
) -> List[Place]:
    """Autocomplete ``query`` then geocode every suggestion concurrently.

    Places come back in suggestion order whatever order the geocodes finish in.
    """
    raw_suggestions = await autocomplete(
        session,
        query,
        api_key=api_key,
        url=autocomp_url,
        language=language,
        countries=countries,
        timeout_s=timeout_s,
    )
    suggestions = [Suggestion.model_validate(item) for item in raw_suggestions]
    logger.info("autocomplete.completed", query=query, suggestions=len(suggestions))

    locations = await asyncio.gather(
        *(
            geocode(session, s.main_text, api_key=api_key, url=geocoding_url, timeout_s=timeout_s)
            for s in suggestions
        )
    )

    return [
        build_place(raw, suggestion, location)
        for raw, suggestion, location in zip(raw_suggestions, suggestions, locations)
    ]
