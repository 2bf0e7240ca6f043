"""Public holiday table extractors and the jurisdiction registry.

Each extractor turns one government holiday listing page into a flat
``{"YYYY-MM-DD": "Holiday name"}`` mapping. They are tied to the markup of the
source page and are expected to need updating when that markup changes, so
they sit behind the :class:`Jurisdiction` registry rather than being called
directly by the calculator.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable

from bs4 import BeautifulSoup, Tag

from bizdays.errors import HolidayTableError, UnknownJurisdictionError


MONTH_NAME_BY_NUM = {
    1: "January",
    2: "February",
    3: "March",
    4: "April",
    5: "May",
    6: "June",
    7: "July",
    8: "August",
    9: "September",
    10: "October",
    11: "November",
    12: "December",
}
MONTH_NUM_BY_NAME = {name: num for num, name in MONTH_NAME_BY_NUM.items()}

VIC_HEADING_RE = re.compile(r"Public holidays in Victoria for (\d{4})")
VIC_TABLE_SUMMARY = "Public holidays in Victoria for"
YEAR_RE = re.compile(r"\d{4}")
FOOTNOTE_RE = re.compile(r"(?<=[A-Za-z)])\d+$")

NSW_ADDITIONAL_DAY = "Additional Day"
NSW_NOT_APPLICABLE = "Not applicable"

HolidayMap = dict[str, str]


def _cell_text(cell: Tag) -> str:
    for sup in cell.find_all("sup"):
        sup.decompose()
    text = cell.get_text(" ", strip=True).replace("\xa0", " ")
    text = " ".join(text.split())
    return FOOTNOTE_RE.sub("", text).strip()


def iso_from_day_month(year: int, text: str) -> str | None:
    """Convert ``'Monday 1 January'`` (weekday optional) into ``'YYYY-MM-DD'``.

    Returns None when the text does not name a real day of ``year``.
    """
    parts = text.replace(",", " ").split()
    if parts and not parts[0][:1].isdigit():
        parts = parts[1:]
    if len(parts) < 2:
        return None
    day_digits = re.sub(r"[^0-9]", "", parts[0])
    month = MONTH_NUM_BY_NAME.get(parts[1].capitalize())
    if not day_digits or month is None:
        return None
    try:
        return date(int(year), month, int(day_digits)).isoformat()
    except ValueError:
        return None


def parse_victorian_public_holidays(html: str) -> HolidayMap:
    """Extract holidays from a business.vic.gov.au yearly holiday page."""
    soup = BeautifulSoup(html, "html.parser")

    year_match = VIC_HEADING_RE.search(soup.get_text(" ", strip=True))
    if not year_match:
        raise HolidayTableError("Could not find year in holiday page.")
    year = int(year_match.group(1))

    table = soup.find("table", summary=lambda s: bool(s) and s.startswith(VIC_TABLE_SUMMARY))
    if table is None:
        raise HolidayTableError("Could not find public holidays table.")

    rows = table.find_all("tr")
    if not rows:
        raise HolidayTableError("Could not find any rows in the table.")

    holidays: HolidayMap = {}
    for row in rows[1:]:
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        name = _cell_text(cells[0])
        date_text = _cell_text(cells[1])
        # AFL Grand Final eve is listed before the date is announced.
        if "subject to" in date_text.lower():
            continue
        iso = iso_from_day_month(year, date_text)
        if iso and name:
            holidays[iso] = name
    return holidays


def _find_nsw_table(soup: BeautifulSoup) -> Tag | None:
    for table in soup.find_all("table"):
        if table.find("thead") is not None and table.find("tbody") is not None:
            return table
    return None


def parse_nsw_public_holidays(html: str) -> HolidayMap:
    """Extract holidays from the nsw.gov.au multi-year holiday table."""
    soup = BeautifulSoup(html, "html.parser")

    table = _find_nsw_table(soup)
    if table is None:
        raise HolidayTableError("Could not find public holidays table.")

    years = [
        int(text)
        for text in (th.get_text(strip=True) for th in table.find("thead").find_all("th"))
        if YEAR_RE.fullmatch(text)
    ]
    if not years:
        raise HolidayTableError("Could not find years in table header.")

    rows = table.find("tbody").find_all("tr")
    if not rows:
        raise HolidayTableError("Could not find any rows in the table.")

    holidays: HolidayMap = {}
    last_name = ""
    for row in rows:
        cells = row.find_all("td")
        if len(cells) < len(years) + 1:
            continue

        name = " ".join(re.sub(r"[0-9]", "", _cell_text(cells[0])).split())
        additional = name == NSW_ADDITIONAL_DAY
        if additional:
            # Nothing to observe when the table opens with an additional day.
            if not last_name:
                continue
            name = f"{last_name} (Observed)"
        else:
            last_name = name

        for year, cell in zip(years, cells[1:]):
            date_text = _cell_text(cell)
            if date_text == NSW_NOT_APPLICABLE:
                continue
            iso = iso_from_day_month(year, date_text)
            if iso:
                holidays[iso] = name

    return dict(sorted(holidays.items()))


def holidays_for_year(holidays: HolidayMap, year: int) -> HolidayMap:
    prefix = f"{int(year):04d}-"
    return {k: v for k, v in holidays.items() if k.startswith(prefix)}


@dataclass(frozen=True)
class Jurisdiction:
    slug: str
    name: str
    source_url: str
    extract: Callable[[str], HolidayMap]

    def url_for(self, year: int) -> str:
        return self.source_url.format(year=int(year))


JURISDICTIONS: dict[str, Jurisdiction] = {
    "victoria": Jurisdiction(
        slug="victoria",
        name="Victoria",
        source_url="https://business.vic.gov.au/business-information/public-holidays/victorian-public-holidays-{year}",
        extract=parse_victorian_public_holidays,
    ),
    "new-south-wales": Jurisdiction(
        slug="new-south-wales",
        name="New South Wales",
        source_url="https://www.nsw.gov.au/about-nsw/public-holidays",
        extract=parse_nsw_public_holidays,
    ),
}
JURISDICTION_ALIASES = {"vic": "victoria", "nsw": "new-south-wales"}


def get_jurisdiction(slug: str) -> Jurisdiction:
    key = str(slug or "").strip().lower()
    key = JURISDICTION_ALIASES.get(key, key)
    try:
        return JURISDICTIONS[key]
    except KeyError:
        raise UnknownJurisdictionError(str(slug)) from None
