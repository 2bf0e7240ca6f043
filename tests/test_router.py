from __future__ import annotations

import json

import pytest

from bizdays.feeds import FEEDS
from bizdays.router import Request, Router, build_router, json_response, today_in_timezone
from bizdays.runtime_logging import read_runtime_events


@pytest.fixture
def router(fake_fetcher) -> Router:
    return build_router(fetcher=fake_fetcher, today=lambda: "2025-09-05")


def _get(router: Router, url: str):
    return router.handle(Request.from_url(url))


def test_business_days_without_jurisdiction_uses_no_holidays(router, fake_fetcher):
    response = _get(router, "/api/business-days?date=2025-09-05")
    assert response.status == 200
    assert response.body["businessDaysToToday"] == 5
    assert response.body["businessDaysTotal"] == 22
    assert response.body["holidays"] is None
    assert response.body["jurisdiction"] is None
    assert fake_fetcher.calls == []


def test_business_days_defaults_to_injected_today(router):
    response = _get(router, "/api/business-days")
    assert response.body["today"] == "2025-09-05"
    assert response.body["startOfMonth"] == "2025-09-01"


def test_business_days_apply_jurisdiction_holidays(router):
    response = _get(router, "/api/business-days/victoria?date=2025-12-31")
    assert response.status == 200
    assert response.body["jurisdiction"] == "victoria"
    assert response.body["businessDaysToToday"] == 21
    assert response.body["holidays"]["2025-12-25"] == "Christmas Day"


def test_business_days_nsw_observed_day(router):
    response = _get(router, "/api/business-days/new-south-wales?date=2026-04-30")
    # 22 weekdays in April 2026, less Good Friday, Easter Monday and the observed Anzac Day.
    assert response.body["businessDaysToToday"] == 19


def test_business_days_invalid_date_is_400(router, fake_fetcher):
    response = _get(router, "/api/business-days/victoria?date=not-a-date")
    assert response.status == 400
    assert "not-a-date" in response.body["error"]
    assert fake_fetcher.calls == []


def test_business_days_unknown_jurisdiction_is_404(router):
    response = _get(router, "/api/business-days/tasmania?date=2025-09-05")
    assert response.status == 404


def test_holiday_source_failure_does_not_fail_business_days(router, isolated_runtime_log):
    response = _get(router, "/api/business-days/victoria?date=2024-09-05")
    assert response.status == 200
    assert response.body["businessDaysToToday"] == 4
    assert response.body["holidays"] is None
    assert "Victoria" in response.body["holidayWarning"]

    events = read_runtime_events(limit=10, event="holiday_source_failed")
    assert len(events) == 1
    assert events[0]["context"] == {"jurisdiction": "victoria", "year": 2024}


def test_victoria_holidays_route(router):
    response = _get(router, "/api/public-holidays/victoria/2025")
    assert response.status == 200
    assert response.body["2025-11-04"] == "Melbourne Cup"


def test_victoria_holidays_upstream_failure_is_500(router):
    response = _get(router, "/api/public-holidays/victoria/2030")
    assert response.status == 500
    assert "Could not fetch" in response.body["error"]
    assert read_runtime_events(limit=5, event="route_failed")


def test_victoria_holidays_bad_year_is_400(router):
    assert _get(router, "/api/public-holidays/victoria/twenty").status == 400


def test_nsw_holidays_route_with_and_without_year(router):
    everything = _get(router, "/api/public-holidays/new-south-wales")
    only_2025 = _get(router, "/api/public-holidays/new-south-wales/2025/")
    assert len(everything.body) == 22
    assert len(only_2025.body) == 10
    assert all(k.startswith("2025-") for k in only_2025.body)


def test_unmatched_paths_and_methods_are_404(router):
    assert _get(router, "/api/lap-lanes").status == 404
    assert _get(router, "/").status == 404
    post = router.handle(Request.from_url("/api/business-days?date=2025-09-05", method="POST"))
    assert post.status == 404
    assert post.text() == "Not Found."


def test_router_extracts_named_params():
    router = Router()
    router.get("/api/items/:name", lambda request: json_response(request.params))
    response = _get(router, "/api/items/elwood/")
    assert response.body == {"name": "elwood"}


def test_json_response_text_is_pretty_json():
    response = json_response({"a": 1})
    assert response.ok
    assert json.loads(response.text()) == {"a": 1}
    assert response.headers["Content-Type"] == "application/json"


def test_today_in_timezone_returns_iso_date():
    text = today_in_timezone("Australia/Melbourne")
    assert len(text) == 10 and text[4] == "-" and text[7] == "-"


def test_business_days_year_missing_from_holiday_table_warns(router, fake_fetcher):
    response = _get(router, "/api/business-days/nsw?date=2027-12-31")
    assert response.status == 200
    assert response.body["jurisdiction"] == "new-south-wales"
    assert response.body["holidays"] is None
    assert response.body["businessDaysToToday"] == 23
    assert "2027" in response.body["holidayWarning"]
    assert fake_fetcher.calls == ["https://www.nsw.gov.au/about-nsw/public-holidays"]

    events = read_runtime_events(limit=10, event="holiday_source_failed")
    assert len(events) == 1
    assert events[0]["context"] == {"jurisdiction": "new-south-wales", "year": 2027}


def test_water_quality_report_route(router):
    response = _get(router, "/api/epa-vic")
    assert response.status == 200
    assert response.body["timestamp"]
    assert "Elwood" in response.body["beachReport"]["sites"]
    assert "Warrandyte" in response.body["yarraWatch"]["sites"]


def test_water_quality_site_route(router):
    response = _get(router, "/api/epa-vic/st-kilda-catani-arch")
    assert response.status == 200
    assert response.body["name"] == "St Kilda (Catani Arch)"
    assert response.body["today"]["rating"] == "poor"


def test_water_quality_unknown_site_is_404(router):
    response = _get(router, "/api/epa-vic/atlantis")
    assert response.status == 404
    assert response.text() == "Not Found."


def test_lap_lane_routes(router):
    stonnington = _get(router, "/api/stonnington/")
    glen_eira = _get(router, "/api/glen-eira")
    assert stonnington.status == 200
    assert stonnington.body["haroldHolt"]["days"]["mon"]["timeSlots"]["05:45"] == 8
    assert glen_eira.status == 200
    assert glen_eira.body["gesac"]["days"]["sat"]["timeSlots"] == {"09:00": 3, "09:30": 0}


def test_feed_layout_change_is_500(router, fake_fetcher):
    fake_fetcher.documents[FEEDS["stonnington"].sources["page"]] = "<html><body>Moved</body></html>"
    response = _get(router, "/api/stonnington")
    assert response.status == 500
    assert "Stonnington" in response.body["error"]
    assert read_runtime_events(limit=5, event="route_failed")
