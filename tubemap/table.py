import pandas as pd

from tubemap.classify import to_number
from tubemap.periods import find_measurement
from tubemap.render import NO_DATA_TEXT
from tubemap.state import empty_filters


TABLE_COLUMNS = ["Location ID", "Name", "Period", "NO₂ (µg/m³)"]


def parse_bound(raw):
    """Min/max filter input to a float, None when blank or not a number"""
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return None
    return to_number(raw)


def build_rows(locations, period):
    """One row per location for the period, sorted for display"""
    rows = []
    for location in locations:
        measurement = find_measurement(location, period) or {}
        rows.append({
            "locationId": location.get("locationId") or "",
            "name": location.get("name") or "",
            "period": period,
            "no2": to_number(measurement.get("val")),
        })
    return sort_rows(rows)


def sort_rows(rows):
    """Rows with data first, highest NO2 first, ties and no-data rows by location id"""
    return sorted(
        rows,
        key=lambda r: (r["no2"] is None, -r["no2"] if r["no2"] is not None else 0, r["locationId"]),
    )


def apply_filters(rows, filters):
    """
    Keep the rows that pass every active filter

    A min or max bound also drops rows without data, whatever hideNoData says.

    Args:
        rows (list): Table rows
        filters (dict): text, min, max, hideNoData

    Returns:
        list: Filtered rows, order preserved
    """
    text = (filters.get("text") or "").strip().lower()
    low = filters.get("min")
    high = filters.get("max")
    hide_no_data = bool(filters.get("hideNoData"))

    kept = []
    for row in rows:
        if text and text not in f"{row['locationId']} {row['name']}".lower():
            continue
        value = row["no2"]
        if hide_no_data and value is None:
            continue
        if low is not None and (value is None or value < low):
            continue
        if high is not None and (value is None or value > high):
            continue
        kept.append(row)
    return kept


class TableController:
    """Current period's rows plus the user's filters, which survive period changes"""

    def __init__(self, state):
        self.state = state

    def render_table_for_month(self, period):
        self.state.current_rows = build_rows(self.state.locations, period)
        return self.visible_rows()

    def visible_rows(self):
        return apply_filters(self.state.current_rows, self.state.filters)

    def set_filters(self, **changes):
        """
        Update some filters and return the visible rows

        Accepts text, min, max and hideNoData (alias hide_no_data); min and max
        may be raw input strings.
        """
        if "hide_no_data" in changes:
            changes["hideNoData"] = changes.pop("hide_no_data")
        unknown = set(changes) - set(self.state.filters)
        if unknown:
            raise KeyError(f"Unknown table filters: {sorted(unknown)}")

        for key in ("min", "max"):
            if key in changes:
                changes[key] = parse_bound(changes[key])
        if "text" in changes:
            changes["text"] = changes["text"] or ""
        if "hideNoData" in changes:
            changes["hideNoData"] = bool(changes["hideNoData"])

        self.state.filters.update(changes)
        return self.visible_rows()

    def reset_filters(self):
        self.state.filters = empty_filters()
        return self.visible_rows()

    def to_frame(self, rows=None):
        """Visible rows as a display DataFrame"""
        if rows is None:
            rows = self.visible_rows()
        df = pd.DataFrame(
            [
                [
                    r["locationId"],
                    r["name"],
                    r["period"],
                    f"{r['no2']:.2f}" if r["no2"] is not None else NO_DATA_TEXT,
                ]
                for r in rows
            ],
            columns=TABLE_COLUMNS,
        )
        return df
