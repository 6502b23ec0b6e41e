from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Protocol

from climamate.config import Settings
from climamate.errors import TransientError, ValidationError, WeatherServiceError
from climamate.schemas import ForecastSnapshot, Notification, WeatherSnapshot, parse_location_query
from climamate.services.presentation import FACTS_BY_PAGE, PageKind, render_page
from climamate.services.trivia import TriviaRotator


logger = logging.getLogger(__name__)

LANDING_ERROR_MESSAGE = "Unable to load weather right now"


class WeatherSource(Protocol):
    async def fetch_current(self, city: str) -> WeatherSnapshot: ...

    async def fetch_forecast(self, city: str) -> ForecastSnapshot: ...


class PageSession:
    """State and scheduled work of one mounted page.

    A session owns two kinds of tasks: the trivia timer and one task per
    outbound weather request. All of them are cancelled on ``unmount()``, and
    nothing a task produces is applied once the session is closed.
    """

    def __init__(
        self,
        *,
        page: PageKind,
        client: WeatherSource,
        settings: Settings,
        dark_mode: bool = False,
    ) -> None:
        self.page = page
        self.client = client
        self.settings = settings
        self.dark_mode = dark_mode
        self.weather: WeatherSnapshot | None = None
        self.forecast: ForecastSnapshot | None = None
        self.notifications: list[Notification] = []
        self.trivia = TriviaRotator(FACTS_BY_PAGE[page])
        self._fetch_tasks: set[asyncio.Task] = set()
        self._trivia_task: asyncio.Task | None = None
        self._mounted = False
        self._closed = False

    async def __aenter__(self) -> "PageSession":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.unmount()

    @property
    def loading(self) -> bool:
        return any(not task.done() for task in self._fetch_tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    async def mount(self) -> None:
        if self._mounted or self._closed:
            raise RuntimeError(f"{self.page} page session cannot be mounted twice.")
        self._mounted = True
        self._trivia_task = asyncio.create_task(
            self.trivia.run(self.settings.trivia_interval_seconds, self._on_trivia_tick),
            name=f"{self.page}-trivia",
        )
        if self.page == "landing":
            self._start_fetches(self.settings.landing_city, include_forecast=False)

    async def unmount(self) -> None:
        if self._closed:
            return
        self._closed = True

        tasks = list(self._fetch_tasks)
        if self._trivia_task is not None:
            tasks.append(self._trivia_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("%s page unmounted, cancelled %s task(s)", self.page, len(tasks))

    def submit(self, city: str | None) -> bool:
        """Start a search. Returns False when the query was rejected locally."""
        if self._closed:
            raise RuntimeError(f"{self.page} page session is closed.")
        try:
            query = parse_location_query(city)
        except ValidationError as exc:
            self._notify("error", exc.user_message)
            return False

        self._start_fetches(query, include_forecast=self.page == "home")
        return True

    async def search(self, city: str | None) -> bool:
        accepted = self.submit(city)
        await self.settle()
        return accepted

    async def settle(self) -> None:
        """Wait until every in-flight request has settled."""
        while self._fetch_tasks:
            await asyncio.gather(*list(self._fetch_tasks), return_exceptions=True)

    def view(self, *, hour: int | None = None) -> dict:
        return render_page(
            page=self.page,
            weather=self.weather,
            forecast=self.forecast,
            loading=self.loading,
            trivia_index=self.trivia.index,
            notifications=self.notifications,
            dark_mode=self.dark_mode,
            hour=datetime.now().hour if hour is None else hour,
            icon_base_url=self.settings.openweather_icon_url,
        )

    def _start_fetches(self, city: str, *, include_forecast: bool) -> None:
        # a new search supersedes whatever the previous one still has in flight
        for task in self._fetch_tasks:
            task.cancel()

        self._track(self._load_current(city), name=f"{self.page}-current")
        if include_forecast:
            self._track(self._load_forecast(city), name=f"{self.page}-forecast")

    def _track(self, coro, *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)

    async def _load_current(self, city: str) -> None:
        try:
            snapshot = await self.client.fetch_current(city)
        except WeatherServiceError as exc:
            self._fail_current(city, exc)
            return
        except Exception as exc:
            logger.exception("Unexpected failure fetching weather for %r", city)
            self._fail_current(city, TransientError(str(exc)))
            return

        if self._closed:
            logger.debug("Dropping weather for %r, page already unmounted", city)
            return
        self.weather = snapshot
        self._notify("success", f"Weather fetched for {snapshot.name}")

    async def _load_forecast(self, city: str) -> None:
        try:
            forecast = await self.client.fetch_forecast(city)
        except Exception as exc:
            logger.warning("Forecast for %r unavailable: %s", city, exc)
            if not self._closed:
                self.forecast = None
            return

        if self._closed:
            logger.debug("Dropping forecast for %r, page already unmounted", city)
            return
        self.forecast = forecast

    def _fail_current(self, city: str, exc: WeatherServiceError) -> None:
        if isinstance(exc, TransientError):
            logger.error("Error fetching weather for %r: %s", city, exc)
        else:
            logger.warning("Weather lookup for %r rejected: %s", city, exc)

        if self._closed:
            return
        self.weather = None
        message = LANDING_ERROR_MESSAGE if self.page == "landing" else exc.user_message
        self._notify("error", message)

    def _on_trivia_tick(self, index: int) -> None:
        logger.debug("%s page trivia advanced to fact %s", self.page, index)

    def _notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))
