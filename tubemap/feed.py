"""
Location feed: fetches ``/api/locations`` and normalises the measurement history.

Each location arrives as::

    {"locationId": "KS-01", "name": "...", "lat": 6.66, "lon": -1.61,
     "description": "...", "history": [{"dateStr": "2025-10", "val": 31.2,
                                         "tubeId": "T-112", "remarks": null}]}

After normalisation every parseable ``dateStr`` is the display label
``"Oct 2025"`` and carries the parsed ``rawDate`` used for ordering.
"""

import json
import logging

import pandas as pd
import requests

from tubemap.config import FEED_TIMEOUT, LOCATIONS_API_URL

logger = logging.getLogger(__name__)

PERIOD_FORMAT = "%b %Y"


def fetch_locations(url=LOCATIONS_API_URL, timeout=FEED_TIMEOUT):
    """
    Fetch the location snapshot from the locations API

    Args:
        url (str): Locations endpoint
        timeout (float): Request timeout in seconds

    Returns:
        list: Normalised locations, or None if the request or decoding failed
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to fetch locations from {url}: {e}")
        return None
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Failed to parse locations JSON from {url}: {e}")
        return None

    if not isinstance(payload, list):
        logger.error(f"Unexpected locations payload from {url}: expected a list, got {type(payload).__name__}")
        return None

    locations = normalize_locations(payload)
    logger.info(f"Loaded {len(locations)} locations from {url}")
    return locations


def parse_period_date(value):
    """Parse a raw date label into a naive Timestamp, or None when unparseable"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


def normalize_period_label(value):
    """
    Normalise a date label to the "Mon YYYY" display format

    Returns:
        tuple: (label, rawDate); for unparseable input the label is returned
        unchanged and rawDate is None
    """
    ts = parse_period_date(value)
    if ts is None:
        return value, None
    return ts.strftime(PERIOD_FORMAT), ts


def normalize_measurement(entry):
    measurement = dict(entry) if isinstance(entry, dict) else {}

    label, raw_date = normalize_period_label(measurement.get("dateStr"))
    measurement["dateStr"] = label
    measurement["rawDate"] = raw_date

    # Older exports used the singular key
    if not measurement.get("remarks") and measurement.get("remark"):
        measurement["remarks"] = measurement["remark"]
    measurement.setdefault("remarks", None)
    measurement.setdefault("tubeId", None)
    measurement.setdefault("val", None)
    return measurement


def normalize_locations(raw_locations):
    """
    Normalise a raw locations payload without mutating it

    Args:
        raw_locations (list): Locations as decoded from the API

    Returns:
        list: New location dicts with a list ``history`` of normalised entries
    """
    locations = []
    for raw in raw_locations or []:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed location entry: {raw!r}")
            continue

        location = dict(raw)
        location["locationId"] = str(raw.get("locationId") or "")
        location["name"] = raw.get("name") or ""
        location["description"] = raw.get("description") or ""

        history = raw.get("history")
        if not isinstance(history, list):
            history = []
        location["history"] = [normalize_measurement(h) for h in history]
        locations.append(location)

    return locations
