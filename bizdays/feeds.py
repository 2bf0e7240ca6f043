"""Registry of the non-holiday upstream feeds (swim lanes, water quality)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from bizdays.fetch import Fetcher, fetch_document, fetch_documents
from bizdays.pools import parse_glen_eira_lanes, parse_stonnington_lanes
from bizdays.water_quality import parse_water_quality_report


Parser = Callable[[dict[str, str]], dict[str, Any]]

PERFECTGYM_CALENDAR_URL = (
    "https://geleisure.perfectgym.com.au/ClientPortal2/api/Calendars/ClubZoneOccupancyCalendar/GetCalendar"
    "?calendarId={calendar_id}&daysPerPage=7"
)


@dataclass(frozen=True)
class Feed:
    """One feed: named source documents plus a parser over all of them."""

    slug: str
    name: str
    sources: dict[str, str]
    parse: Parser


def _single_document(parser: Callable[[str], dict[str, Any]]) -> Parser:
    def parse(documents: dict[str, str]) -> dict[str, Any]:
        (document,) = documents.values()
        return parser(document)

    return parse


FEEDS: dict[str, Feed] = {
    "epa-vic": Feed(
        slug="epa-vic",
        name="EPA Victoria water quality",
        sources={"report": "https://www.epa.vic.gov.au/for-community/summer-water-quality/water-quality-across-victoria"},
        parse=_single_document(parse_water_quality_report),
    ),
    "stonnington": Feed(
        slug="stonnington",
        name="Stonnington lap lanes",
        sources={"page": "https://www.stonnington.vic.gov.au/active/Swim/Lane-availability"},
        parse=_single_document(parse_stonnington_lanes),
    ),
    "glen-eira": Feed(
        slug="glen-eira",
        name="Glen Eira lap lanes",
        sources={
            "carnegie": PERFECTGYM_CALENDAR_URL.format(calendar_id="0bb104dd7"),
            "gesac": PERFECTGYM_CALENDAR_URL.format(calendar_id="2c38d8a41"),
        },
        parse=parse_glen_eira_lanes,
    ),
}


def load_feed(feed: Feed, fetcher: Fetcher = fetch_document) -> dict[str, Any]:
    """Fetch every source of ``feed`` concurrently and parse them into one payload."""
    documents = fetch_documents(feed.sources.values(), fetcher=fetcher)
    payload = feed.parse({key: documents[url] for key, url in feed.sources.items()})
    return {"timestamp": datetime.now(timezone.utc).isoformat(), **payload}
