"""Upstream document fetching."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable

import requests

from bizdays.errors import HolidayTableError, UpstreamFetchError
from bizdays.holidays import HolidayMap, Jurisdiction, holidays_for_year
from bizdays.settings import load_settings


Fetcher = Callable[[str], str]

DEFAULT_MAX_WORKERS = 4


def fetch_document(
    url: str,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> str:
    """GET ``url`` and return the response body as text."""
    settings = load_settings()
    client = session or requests
    try:
        resp = client.get(
            url,
            headers={"User-Agent": settings.user_agent},
            timeout=timeout if timeout is not None else settings.http_timeout_sec,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise UpstreamFetchError(url, str(exc)) from exc
    return resp.text


def fetch_documents(
    urls: Iterable[str],
    fetcher: Fetcher = fetch_document,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> dict[str, str]:
    """Fetch several documents concurrently, keyed by URL.

    The first failure is re-raised once every request has finished.
    """
    unique = list(dict.fromkeys(urls))
    if not unique:
        return {}
    workers = max(1, min(int(max_workers), len(unique)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {url: pool.submit(fetcher, url) for url in unique}
    return {url: future.result() for url, future in futures.items()}


def load_holidays(jurisdiction: Jurisdiction, year: int, fetcher: Fetcher = fetch_document) -> HolidayMap:
    """Fetch and extract ``jurisdiction``'s holidays falling in ``year``."""
    html = fetcher(jurisdiction.url_for(year))
    holidays = holidays_for_year(jurisdiction.extract(html), year)
    if not holidays:
        raise HolidayTableError(f"No {jurisdiction.name} public holidays listed for {int(year)}.")
    return holidays

