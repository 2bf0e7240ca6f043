from __future__ import annotations

from pathlib import Path

import pytest

import bizdays.runtime_logging as runtime_logging
from bizdays.errors import UpstreamFetchError
from bizdays.feeds import FEEDS
from bizdays.holidays import JURISDICTIONS


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeFetcher:
    """Serves fixture documents by URL and records every requested URL."""

    def __init__(self, documents: dict[str, str]):
        self.documents = documents
        self.calls: list[str] = []

    def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.documents:
            raise UpstreamFetchError(url, "404 Client Error: Not Found")
        return self.documents[url]


@pytest.fixture(autouse=True)
def isolated_runtime_log(tmp_path, monkeypatch) -> Path:
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", Path(tmp_path) / "runtime_events.jsonl")
    return Path(tmp_path) / "runtime_events.jsonl"


@pytest.fixture
def vic_html() -> str:
    return (FIXTURES_DIR / "vic_public_holidays_2025.html").read_text(encoding="utf-8")


@pytest.fixture
def nsw_html() -> str:
    return (FIXTURES_DIR / "nsw_public_holidays.html").read_text(encoding="utf-8")


def _fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def epa_html() -> str:
    return _fixture("epa_water_quality.html")


@pytest.fixture
def stonnington_html() -> str:
    return _fixture("stonnington_lanes.html")


@pytest.fixture
def glen_eira_documents() -> dict[str, str]:
    return {
        "carnegie": _fixture("glen_eira_carnegie.json"),
        "gesac": _fixture("glen_eira_gesac.json"),
    }


@pytest.fixture
def fake_fetcher(vic_html, nsw_html, epa_html, stonnington_html, glen_eira_documents) -> FakeFetcher:
    glen_eira = FEEDS["glen-eira"].sources
    return FakeFetcher(
        {
            JURISDICTIONS["victoria"].url_for(2025): vic_html,
            JURISDICTIONS["new-south-wales"].source_url: nsw_html,
            FEEDS["epa-vic"].sources["report"]: epa_html,
            FEEDS["stonnington"].sources["page"]: stonnington_html,
            glen_eira["carnegie"]: glen_eira_documents["carnegie"],
            glen_eira["gesac"]: glen_eira_documents["gesac"],
        }
    )
