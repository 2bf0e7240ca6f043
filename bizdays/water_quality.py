"""EPA Victoria beach and Yarra water-quality report adapter."""

from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from bizdays.errors import FeedLayoutError


BEACH_REPORT = "Beach Report"
YARRA_WATCH = "Yarra Watch"
SECTIONS = {"beachReport": BEACH_REPORT, "yarraWatch": YARRA_WATCH}

UPDATED_RE = re.compile(r"Updated\s+(\d{1,2}(?::\d{2})?[ap]m\s+\d{1,2}\s+\w+\s+\d{4}\s+[A-Z]+)", re.IGNORECASE)


def slug_name(name: str) -> str:
    """``'St Kilda (Catani Arch)'`` -> ``'st-kilda-catani-arch'``."""
    return re.sub(r"[^a-z0-9]+", "-", str(name).lower()).strip("-")


def _water_quality(cell: Tag) -> dict[str, str | None]:
    rating = None
    indicator = cell.find(class_="indicator")
    if indicator is not None:
        classes = [c for c in indicator.get("class", []) if c != "indicator"]
        rating = classes[0] if classes else None
    p = cell.find("p")
    message = " ".join(p.get_text(" ", strip=True).replace("\xa0", " ").split()) if p else None
    return {"rating": rating, "message": message or None}


def _links(cell: Tag) -> list[dict[str, str]]:
    return [
        {"url": a["href"].strip(), "text": a.get_text(" ", strip=True)}
        for a in cell.find_all("a", href=True)
    ]


def _section_table(soup: BeautifulSoup, heading: str) -> Tag | None:
    for h2 in soup.find_all("h2"):
        if h2.get_text(strip=True) == heading:
            return h2.find_next("table")
    return None


def _sites(table: Tag) -> dict[str, Any]:
    sites: dict[str, Any] = {}
    for row in table.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) < 4:
            continue
        name = cells[0].get_text(" ", strip=True)
        if not name or name == "Site":
            continue
        sites[name] = {
            "name": name,
            "slugName": slug_name(name),
            "today": _water_quality(cells[1]),
            "tomorrow": _water_quality(cells[2]),
            "links": _links(cells[3]),
        }
    return sites


def last_updated(soup: BeautifulSoup) -> str | None:
    m = UPDATED_RE.search(soup.get_text(" ", strip=True))
    return m.group(1) if m else None


def parse_water_quality_report(html: str) -> dict[str, Any]:
    """Both report sections; a missing section carries an ``error`` entry."""
    soup = BeautifulSoup(html, "html.parser")
    updated = last_updated(soup)
    report: dict[str, Any] = {}
    for key, heading in SECTIONS.items():
        table = _section_table(soup, heading)
        if table is None:
            report[key] = {"error": f"{heading} section not found"}
        else:
            report[key] = {"lastUpdated": updated, "sites": _sites(table)}
    if all("error" in section for section in report.values()):
        raise FeedLayoutError("Could not find any water quality report sections.")
    return report


def find_site(report: dict[str, Any], name: str) -> dict[str, Any] | None:
    """Look up a beach report site by name or slug."""
    wanted = slug_name(name)
    for site in report.get("beachReport", {}).get("sites", {}).values():
        if site["slugName"] == wanted:
            return site
    return None
