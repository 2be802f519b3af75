from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import aiohttp
import structlog

from places_autocomplete.config import Settings
from places_autocomplete.errors import UNKNOWN_ERROR, EmptyLanguageError, MissingApiKeyError
from places_autocomplete.models import OrchestratorState, Place
from places_autocomplete.services.debounce import Debouncer
from places_autocomplete.services.google_places import fetch_places

logger = structlog.get_logger(__name__)

DEFAULT_AUTOCOMP_URL = "https://places.googleapis.com/v1/places:autocomplete"
DEFAULT_GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/json"

Listener = Callable[[OrchestratorState], None]


class QueryOrchestrator:
    """Debounced autocomplete + geocode pipeline with observable state.

    ``set_query`` must be called from inside a running event loop. Every state
    transition is pushed to the subscribed listeners as a snapshot.

    Each debounce cycle gets a token; when a newer query supersedes a cycle whose
    requests are already in flight, its results are dropped instead of published.
    """

    def __init__(
        self,
        *,
        gcp_api_key: str,
        language: str = "fr",
        countries: Sequence[str] = (),
        timeout_value: float = 1500,
        autocomp_url: str = DEFAULT_AUTOCOMP_URL,
        geocoding_url: str = DEFAULT_GEOCODING_URL,
        http_timeout_s: float = 20.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        if not gcp_api_key:
            raise MissingApiKeyError()
        if not language:
            raise EmptyLanguageError()

        self.gcp_api_key = gcp_api_key
        self.language = language
        self.countries = list(countries)
        self.timeout_value = timeout_value
        self.autocomp_url = str(autocomp_url)
        self.geocoding_url = str(geocoding_url)
        self.http_timeout_s = http_timeout_s

        self._session = session
        self._owns_session = session is None
        self._debouncer = Debouncer(timeout_value / 1000)
        self._listeners: List[Listener] = []
        self._cycle = 0
        self._loading_cycle: Optional[int] = None
        self._state = OrchestratorState()

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[aiohttp.ClientSession] = None
    ) -> "QueryOrchestrator":
        return cls(
            gcp_api_key=settings.gcp_api_key,
            language=settings.language,
            countries=settings.countries,
            timeout_value=settings.timeout_value,
            autocomp_url=str(settings.autocomp_url),
            geocoding_url=str(settings.geocoding_url),
            http_timeout_s=settings.http_timeout_s,
            session=session,
        )

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def query(self) -> str:
        return self._state.query

    @property
    def places(self) -> List[Place]:
        return self._state.places

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_query(self, text: str) -> None:
        if text and text == self._state.query:
            return

        self._cycle += 1
        self._debouncer.cancel()
        self._update(query=text)

        if not text:
            self._update(places=[])
            return

        token = self._cycle
        self._debouncer.schedule(lambda: self._run_cycle(token, text))

    async def search(self, query: str) -> List[Place]:
        """Run the pipeline once for ``query``, without debounce or state changes."""
        return await fetch_places(
            self._get_session(),
            query,
            api_key=self.gcp_api_key,
            autocomp_url=self.autocomp_url,
            geocoding_url=self.geocoding_url,
            language=self.language,
            countries=self.countries,
            timeout_s=self.http_timeout_s,
        )

    async def wait(self) -> None:
        await self._debouncer.wait()

    async def aclose(self) -> None:
        self._debouncer.cancel()
        await self._debouncer.wait()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _run_cycle(self, token: int, query: str) -> None:
        log = logger.bind(query=query, cycle=token)
        self._loading_cycle = token
        self._update(loading=True, error=None)
        log.info("cycle.started")

        places: Optional[List[Place]] = None
        error: Optional[str] = None
        try:
            places = await self.search(query)
        except aiohttp.ContentTypeError as exc:
            error = str(exc) or UNKNOWN_ERROR
        except aiohttp.ClientResponseError as exc:
            error = f"HTTP error {exc.status}"
        except Exception as exc:
            error = str(exc) or UNKNOWN_ERROR

        if token != self._cycle:
            log.info("cycle.discarded", latest_cycle=self._cycle)
            if self._loading_cycle == token:
                self._loading_cycle = None
                self._update(loading=False)
            return

        self._loading_cycle = None
        if error is not None:
            log.warning("cycle.failed", error=error)
            self._update(error=error, loading=False)
        else:
            log.info("cycle.completed", places=len(places))
            self._update(places=places, loading=False)

    def _update(self, **changes) -> None:
        for key, value in changes.items():
            setattr(self._state, key, value)
        snapshot = self._state.model_copy()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("listener.failed", listener=repr(listener))
