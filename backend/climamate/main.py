from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, StreamingResponse
from fastapi.templating import Jinja2Templates

from climamate.config import get_settings
from climamate.errors import NotFoundError, ValidationError, WeatherServiceError
from climamate.logging_config import setup_logging
from climamate.schemas import parse_location_query
from climamate.services.page import PageSession
from climamate.services.presentation import FACTS_BY_PAGE, build_forecast_cards, build_weather_card
from climamate.services.trivia import TriviaRotator
from climamate.services.weather_client import WeatherClient


settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

weather_client = WeatherClient(settings=settings)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

THEME_COOKIE = "climamate_theme"

if not settings.openweather_api_key:
    logger.warning("OPENWEATHER_API_KEY is not set; weather lookups will report an invalid API key.")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await weather_client.close()


@app.exception_handler(WeatherServiceError)
async def weather_error_handler(request: Request, exc: WeatherServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=_status_for_error(exc),
        content={"detail": exc.user_message, "error": type(exc).__name__},
    )


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "service": settings.app_name,
        "api_key_configured": bool(settings.openweather_api_key),
        "timestamp_utc": datetime.now(tz=timezone.utc).isoformat(),
    }


@app.get("/", response_class=HTMLResponse)
async def landing_page(request: Request) -> HTMLResponse:
    async with PageSession(
        page="landing",
        client=weather_client,
        settings=settings,
        dark_mode=_dark_mode(request),
    ) as session:
        await session.settle()
        view = session.view()

    return templates.TemplateResponse(
        request,
        "landing.html",
        {"view": view, "app_name": settings.app_name},
    )


@app.get("/homepage", response_class=HTMLResponse)
async def home_page(request: Request, city: str | None = Query(default=None)) -> HTMLResponse:
    async with PageSession(
        page="home",
        client=weather_client,
        settings=settings,
        dark_mode=_dark_mode(request),
    ) as session:
        if city is not None:
            await session.search(city)
        view = session.view()

    return templates.TemplateResponse(
        request,
        "home.html",
        {"view": view, "app_name": settings.app_name, "city": city or ""},
    )


@app.post("/preferences/theme")
async def toggle_theme(request: Request, next_path: str = Query(default="/", alias="next")) -> RedirectResponse:
    # only local paths, never an absolute or protocol-relative URL
    if not next_path.startswith("/") or next_path.startswith("//"):
        next_path = "/"

    response = RedirectResponse(url=next_path, status_code=303)
    response.set_cookie(THEME_COOKIE, "light" if _dark_mode(request) else "dark", samesite="lax")
    return response


@app.get("/api/weather")
async def current_weather(city: str = Query(default="")) -> dict:
    query = parse_location_query(city)
    snapshot = await weather_client.fetch_current(query)
    return {
        "weather": snapshot.model_dump(mode="json"),
        "card": build_weather_card(snapshot, page="home", icon_base_url=settings.openweather_icon_url),
    }


@app.get("/api/forecast")
async def forecast(city: str = Query(default="")) -> dict:
    query = parse_location_query(city)
    snapshot = await weather_client.fetch_forecast(query)
    return {
        "forecast": snapshot.model_dump(mode="json"),
        "daily": build_forecast_cards(snapshot, icon_base_url=settings.openweather_icon_url),
    }


@app.get("/api/suggestions")
async def city_suggestions(query: str = Query(min_length=2, max_length=80)) -> dict:
    results = await weather_client.suggest_cities(query)
    return {"results": [item.model_dump() for item in results]}


@app.get("/api/trivia/{page}")
async def trivia(page: str) -> dict:
    facts = _facts_for(page)
    return {
        "page": page,
        "facts": list(facts),
        "interval_seconds": settings.trivia_interval_seconds,
    }


@app.get("/api/trivia/{page}/stream")
async def trivia_stream(page: str, limit: int | None = Query(default=None, ge=0, le=1000)) -> StreamingResponse:
    rotator = TriviaRotator(_facts_for(page))

    async def events():
        async for fact in rotator.stream(settings.trivia_interval_seconds, max_ticks=limit):
            yield f"data: {json.dumps({'index': rotator.index, 'fact': fact})}\n\n"

    return StreamingResponse(events(), media_type="text/event-stream")


def _facts_for(page: str) -> tuple[str, ...]:
    facts = FACTS_BY_PAGE.get(page)
    if facts is None:
        raise HTTPException(status_code=404, detail=f"Unknown page '{page}'.")
    return facts


def _dark_mode(request: Request) -> bool:
    return request.cookies.get(THEME_COOKIE) == "dark"


def _status_for_error(exc: WeatherServiceError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    return 502
