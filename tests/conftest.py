import pytest

from tubemap.dashboard import Dashboard
from tubemap.feed import normalize_locations


@pytest.fixture
def raw_locations():
    return [
        {
            "locationId": "KS-01",
            "name": "Adum Market",
            "lat": 6.6885,
            "lon": -1.6244,
            "description": "busy junction next to the market",
            "history": [
                {"dateStr": "2024-12", "val": 30, "tubeId": "T-090", "remarks": None},
                {"dateStr": "2025-10", "val": 45, "tubeId": "T-101", "remarks": "  near road works "},
                {"dateStr": "2025-11", "val": 5, "tubeId": "T-117", "remarks": ""},
            ],
        },
        {
            "locationId": "KS-02",
            "name": "Bantama",
            "lat": 0,
            "lon": -1.63,
            "description": "",
            "history": [{"dateStr": "2025-10", "val": 12, "tubeId": "T-102"}],
        },
        {
            "locationId": "KS-03",
            "name": "Asafo",
            "lat": 6.68,
            "lon": -1.61,
            "description": "roundabout",
            "history": [
                {"dateStr": "2025-09", "val": None, "tubeId": "T-088"},
                {"dateStr": "2025-10", "val": "abc", "tubeId": "T-103"},
            ],
        },
        {
            "locationId": "KS-04",
            "name": "Tech Junction",
            "lat": 6.67,
            "lon": -1.57,
        },
    ]


@pytest.fixture
def locations(raw_locations):
    return normalize_locations(raw_locations)


@pytest.fixture
def dashboard(locations):
    dashboard = Dashboard(locations)
    dashboard.start()
    return dashboard
