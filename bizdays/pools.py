"""Lap-lane availability adapters for council swim centres."""

from __future__ import annotations

import json
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from bizdays.calendar_utils import WEEKDAY_NAMES, parse_iso_date
from bizdays.errors import FeedLayoutError, InvalidDateError
from bizdays.holidays import MONTH_NAME_BY_NUM


DAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
CLOSED_COLOURS = {"rgb(255, 130, 130)", "rgb(255, 133, 133)"}

STONNINGTON_POOLS = {
    "haroldHolt": "Harold Holt 50m pool",
    "prahran": "Prahran Aquatic 50m Pool",
}

TIME_RE = re.compile(r"(\d{1,2}):?(\d{2})?\s*(am|pm)?", re.IGNORECASE)
LANES_RE = re.compile(r"(\d+)\s*lanes?", re.IGNORECASE)
BACKGROUND_RE = re.compile(r"background-color:\s*rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)", re.IGNORECASE)


def normalize_time(text: str) -> str | None:
    """Return the first time in ``text`` as 24-hour ``HH:MM`` (``'5:45am - 6am'`` -> ``'05:45'``)."""
    m = TIME_RE.search(text or "")
    if not m:
        return None
    hours = int(m.group(1))
    minutes = int(m.group(2) or 0)
    period = (m.group(3) or "").lower()
    if period == "pm" and hours < 12:
        hours += 12
    if period == "am" and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"


def lane_count(background: str | None, text: str) -> int:
    if background in CLOSED_COLOURS or "closed" in text.lower():
        return 0
    m = LANES_RE.search(text)
    return int(m.group(1)) if m else 0


def _background(cell: Tag) -> str | None:
    m = BACKGROUND_RE.search(cell.get("style", ""))
    if not m:
        return None
    return "rgb({}, {}, {})".format(*m.groups())


def _pool_table(soup: BeautifulSoup, heading: str) -> Tag | None:
    for h2 in soup.find_all("h2"):
        if heading.lower() in h2.get_text(" ", strip=True).lower():
            return h2.find_next("table")
    return None


def _lane_days(table: Tag) -> dict[str, Any]:
    rows = table.find_all("tr")
    if len(rows) < 2:
        return {}

    header = [c.get_text(" ", strip=True) for c in rows[0].find_all(["th", "td"])][1:]
    days: dict[str, Any] = {}
    for idx, key in enumerate(DAY_KEYS):
        label = header[idx] if idx < len(header) and header[idx] else key
        days[key] = {"name": label, "timeSlots": {}}

    for row in rows[1:]:
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        time = normalize_time(cells[0].get_text(" ", strip=True))
        if time is None:
            continue
        for key, cell in zip(DAY_KEYS, cells[1:]):
            text = cell.get_text(" ", strip=True).replace("\xa0", " ")
            days[key]["timeSlots"][time] = lane_count(_background(cell), text)

    return {k: v for k, v in days.items() if v["timeSlots"]}


def parse_stonnington_lanes(html: str) -> dict[str, Any]:
    """Lane counts per day and time slot for the Stonnington 50m pools."""
    soup = BeautifulSoup(html, "html.parser")
    result: dict[str, Any] = {}
    found = False
    for key, heading in STONNINGTON_POOLS.items():
        table = _pool_table(soup, heading)
        if table is None:
            result[key] = {"days": {}, "error": f"Table not found for {heading}"}
            continue
        found = True
        result[key] = {"days": _lane_days(table)}
    if not found:
        raise FeedLayoutError("Could not find any Stonnington pool tables.")
    return result


def _day_label(iso_text: str) -> str:
    day = parse_iso_date(iso_text)
    return f"{WEEKDAY_NAMES[day.weekday()]} {day.day} {MONTH_NAME_BY_NUM[day.month]}"


def _hourly_slots(hours: list[dict[str, Any]]) -> dict[str, int]:
    # Half hours with the same availability collapse into one hourly slot.
    halves: dict[str, dict[str, int | None]] = {}
    for hour in hours:
        value = str(hour["fromHour"]["value"])
        availability = int(hour.get("totalCountOfOccupancyAvailability") or 0) if hour.get("isAvailable") else 0
        slot = halves.setdefault(value[:2], {"00": None, "30": None})
        slot["30" if value[3:5] == "30" else "00"] = availability

    out: list[tuple[str, int]] = []
    for hh, slot in halves.items():
        if slot["00"] == slot["30"]:
            out.append((f"{hh}:00", slot["00"]))
        else:
            out.extend((f"{hh}:{mm}", v) for mm, v in slot.items() if v is not None)
    return dict(sorted(out))


def parse_zone_occupancy(document: str) -> dict[str, Any]:
    """Convert one PerfectGym zone-occupancy calendar into lane-feed days."""
    try:
        data = json.loads(document)
        paging_days = data["paging"]["days"]
        blocks = {str(b["date"])[:10]: b for b in data["dayBlocks"]}
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise FeedLayoutError(f"Unexpected zone occupancy calendar: {exc}") from exc

    days: dict[str, Any] = {}
    for day in paging_days:
        iso = str(day.get("date", ""))[:10]
        block = blocks.get(iso)
        if block is None:
            continue
        try:
            name = _day_label(iso)
            slots = _hourly_slots(block.get("hours") or [])
        except (InvalidDateError, KeyError, TypeError, ValueError) as exc:
            raise FeedLayoutError(f"Unexpected zone occupancy day {iso!r}: {exc}") from exc
        days[str(day.get("displayWeekDay", iso)).lower()] = {"name": name, "date": iso, "timeSlots": slots}
    return {"days": days}


def parse_glen_eira_lanes(documents: dict[str, str]) -> dict[str, Any]:
    return {key: parse_zone_occupancy(doc) for key, doc in documents.items()}
