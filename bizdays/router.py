"""Transport-agnostic request router for the holiday, business-day, and facility feeds."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import parse_qsl, urlsplit

import pandas as pd

from bizdays.calendar_utils import compute, parse_iso_date
from bizdays.errors import BizdaysError, InvalidDateError, UnknownJurisdictionError
from bizdays.feeds import FEEDS, load_feed
from bizdays.fetch import Fetcher, fetch_document, load_holidays
from bizdays.holidays import HolidayMap, get_jurisdiction, holidays_for_year
from bizdays.runtime_logging import append_runtime_event
from bizdays.settings import load_settings
from bizdays.water_quality import find_site


JSON_HEADERS = {"Content-Type": "application/json"}
TEXT_HEADERS = {"Content-Type": "text/plain"}


@dataclass
class ApiResponse:
    status: int
    body: Any
    headers: dict[str, str] = field(default_factory=lambda: dict(JSON_HEADERS))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        if self.headers.get("Content-Type") == "application/json":
            return json.dumps(self.body, indent=2, ensure_ascii=False)
        return str(self.body)


def json_response(data: Any, status: int = 200) -> ApiResponse:
    return ApiResponse(status=status, body=data)


def error_response(message: str, status: int) -> ApiResponse:
    return json_response({"error": message}, status)


def not_found_response() -> ApiResponse:
    return ApiResponse(status=404, body="Not Found.", headers=dict(TEXT_HEADERS))


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str, method: str = "GET") -> "Request":
        parts = urlsplit(url)
        return cls(method=method.upper(), path=parts.path or "/", query=dict(parse_qsl(parts.query)))


Handler = Callable[[Request], ApiResponse]


def trim_trailing_slashes(path: str) -> str:
    if not isinstance(path, str):
        return ""
    return path.rstrip("/")


def _compile_path(path: str) -> re.Pattern[str]:
    pieces = []
    for segment in trim_trailing_slashes(path).split("/"):
        if segment == "*":
            pieces.append(".*")
        elif segment.startswith(":"):
            pieces.append(f"(?P<{segment[1:]}>[^/]+)")
        else:
            pieces.append(re.escape(segment))
    return re.compile("/".join(pieces))


class Router:
    def __init__(self) -> None:
        self.routes: list[tuple[str | None, re.Pattern[str], Handler]] = []

    def register(self, handler: Handler, path: str, method: str | None = None) -> None:
        self.routes.append((method.upper() if method else None, _compile_path(path), handler))

    def get(self, path: str, handler: Handler) -> None:
        self.register(handler, path, "GET")

    def all(self, path: str, handler: Handler) -> None:
        self.register(handler, path)

    def match(self, request: Request) -> tuple[Handler, dict[str, str]] | None:
        path = trim_trailing_slashes(request.path)
        for method, pattern, handler in self.routes:
            if method is not None and method != request.method.upper():
                continue
            m = pattern.fullmatch(path)
            if m:
                return handler, m.groupdict()
        return None

    def handle(self, request: Request) -> ApiResponse:
        found = self.match(request)
        if found is None:
            return not_found_response()
        handler, params = found
        request = Request(method=request.method, path=request.path, query=request.query, params=params)
        try:
            return handler(request)
        except InvalidDateError as exc:
            return error_response(str(exc), 400)
        except UnknownJurisdictionError:
            return not_found_response()
        except BizdaysError as exc:
            append_runtime_event(
                level="ERROR",
                event="route_failed",
                message=str(exc),
                context={"path": request.path, "params": params},
                exc=exc,
            )
            return error_response(str(exc), 500)


def today_in_timezone(tz: str) -> str:
    """Return today's date in the civil calendar of ``tz`` as ``YYYY-MM-DD``."""
    return pd.Timestamp.now(tz=tz).date().isoformat()


def _year_param(value: str | None) -> int:
    text = str(value or "").strip()
    if not re.fullmatch(r"\d{4}", text):
        raise InvalidDateError(value, "expected a four digit year")
    return int(text)


def build_router(fetcher: Fetcher = fetch_document, today: Callable[[], str] | None = None) -> Router:
    """Wire the feed routes with an injectable fetcher and clock."""
    if today is None:
        timezone = load_settings().timezone

        def today() -> str:
            return today_in_timezone(timezone)

    def victoria_holidays(request: Request) -> ApiResponse:
        year = _year_param(request.params.get("year"))
        return json_response(load_holidays(get_jurisdiction("victoria"), year, fetcher=fetcher))

    def nsw_holidays(request: Request) -> ApiResponse:
        nsw = get_jurisdiction("new-south-wales")
        holidays = nsw.extract(fetcher(nsw.source_url))
        if request.params.get("year"):
            holidays = holidays_for_year(holidays, _year_param(request.params["year"]))
        return json_response(holidays)

    def business_days(request: Request) -> ApiResponse:
        slug = request.params.get("jurisdiction")
        jurisdiction = get_jurisdiction(slug) if slug else None
        date_text = request.query.get("date") or today()
        day = parse_iso_date(date_text)

        holidays: HolidayMap | None = None
        warning = None
        if jurisdiction is not None:
            try:
                holidays = load_holidays(jurisdiction, day.year, fetcher=fetcher)
            except BizdaysError as exc:
                warning = f"Holidays unavailable for {jurisdiction.name}: {exc}"
                append_runtime_event(
                    level="WARNING",
                    event="holiday_source_failed",
                    message=warning,
                    context={"jurisdiction": jurisdiction.slug, "year": day.year},
                    exc=exc,
                )

        payload = compute(date_text, holidays).to_payload()
        payload["jurisdiction"] = jurisdiction.slug if jurisdiction else None
        if warning:
            payload["holidayWarning"] = warning
        return json_response(payload)

    def feed(slug: str) -> Handler:
        def handler(request: Request) -> ApiResponse:
            return json_response(load_feed(FEEDS[slug], fetcher=fetcher))

        return handler

    def water_quality_site(request: Request) -> ApiResponse:
        report = load_feed(FEEDS["epa-vic"], fetcher=fetcher)
        site = find_site(report, request.params.get("name", ""))
        if site is None:
            return not_found_response()
        return json_response(site)

    router = Router()
    router.get("/api/public-holidays/victoria/:year", victoria_holidays)
    router.get("/api/public-holidays/new-south-wales", nsw_holidays)
    router.get("/api/public-holidays/new-south-wales/:year", nsw_holidays)
    router.get("/api/business-days", business_days)
    router.get("/api/business-days/:jurisdiction", business_days)
    router.get("/api/epa-vic", feed("epa-vic"))
    router.get("/api/epa-vic/:name", water_quality_site)
    router.get("/api/stonnington", feed("stonnington"))
    router.get("/api/glen-eira", feed("glen-eira"))
    router.all("*", lambda request: not_found_response())
    return router
