import copy
import json
import logging

import pandas as pd
import requests

from tubemap import feed
from tubemap.feed import fetch_locations, normalize_locations, normalize_period_label


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.bad_json:
            raise json.JSONDecodeError("Expecting value", "<html>", 0)
        return self.payload


def test_normalize_period_label():
    label, raw_date = normalize_period_label("2025-10")
    assert label == "Oct 2025"
    assert raw_date == pd.Timestamp("2025-10-01")


def test_normalize_period_label_strips_timezone():
    label, raw_date = normalize_period_label("2025-03-01T00:00:00Z")
    assert label == "Mar 2025"
    assert raw_date.tzinfo is None


def test_normalize_period_label_keeps_unparseable_text():
    assert normalize_period_label("sometime soon") == ("sometime soon", None)
    assert normalize_period_label("") == ("", None)
    assert normalize_period_label(None) == (None, None)


def test_normalize_locations_does_not_mutate_input(raw_locations):
    original = copy.deepcopy(raw_locations)
    normalize_locations(raw_locations)
    assert raw_locations == original


def test_normalize_locations_fills_defaults(locations):
    tech = locations[3]
    assert tech["history"] == []
    assert tech["description"] == ""

    adum = locations[0]
    assert [h["dateStr"] for h in adum["history"]] == ["Dec 2024", "Oct 2025", "Nov 2025"]
    assert all(h["rawDate"] is not None for h in adum["history"])


def test_unparseable_entries_stay_in_history():
    [location] = normalize_locations([
        {"locationId": "X", "history": [{"dateStr": "n/a", "val": 3}, {"dateStr": "2025-01", "val": 4}]},
    ])
    assert len(location["history"]) == 2
    assert location["history"][0]["rawDate"] is None
    assert location["history"][0]["dateStr"] == "n/a"


def test_legacy_remark_key_is_folded():
    [location] = normalize_locations([
        {"locationId": "X", "history": [{"dateStr": "2025-01", "val": 4, "remark": "tube missing cap"}]},
    ])
    assert location["history"][0]["remarks"] == "tube missing cap"


def test_malformed_location_entries_are_skipped():
    assert normalize_locations(["junk", None, {"locationId": 7}]) == [
        {"locationId": "7", "name": "", "description": "", "history": []},
    ]


def test_fetch_locations(monkeypatch, raw_locations):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(raw_locations)

    monkeypatch.setattr(feed.requests, "get", fake_get)

    locations = fetch_locations("http://example.test/api/locations", timeout=3)
    assert calls == [("http://example.test/api/locations", 3)]
    assert len(locations) == 4
    assert locations[0]["history"][1]["dateStr"] == "Oct 2025"


def test_fetch_locations_network_failure(monkeypatch, caplog):
    def fake_get(url, timeout):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(feed.requests, "get", fake_get)

    with caplog.at_level(logging.ERROR, logger="tubemap.feed"):
        assert fetch_locations("http://example.test/api/locations") is None
    assert "Failed to fetch locations" in caplog.text


def test_fetch_locations_http_error(monkeypatch):
    monkeypatch.setattr(feed.requests, "get", lambda url, timeout: FakeResponse([], status_code=500))
    assert fetch_locations("http://example.test/api/locations") is None


def test_fetch_locations_bad_json(monkeypatch, caplog):
    monkeypatch.setattr(feed.requests, "get", lambda url, timeout: FakeResponse(bad_json=True))

    with caplog.at_level(logging.ERROR, logger="tubemap.feed"):
        assert fetch_locations("http://example.test/api/locations") is None
    assert "Failed to parse locations JSON" in caplog.text


def test_fetch_locations_rejects_non_list_payload(monkeypatch):
    monkeypatch.setattr(feed.requests, "get", lambda url, timeout: FakeResponse({"error": "nope"}))
    assert fetch_locations("http://example.test/api/locations") is None
