"""
View models for a single location.

``render_location`` is pure: it maps a location plus its display data to a
dict that any target can draw. ``to_html`` is the one target used by the
Streamlit host (map hover text, overlay panel, comparison cards).
"""

import html

from tubemap.classify import classify, explain, to_number
from tubemap.config import UNIT
from tubemap.periods import find_measurement

POPUP = "popup"
OVERLAY = "overlay"
CARD = "card"
MODES = (POPUP, OVERLAY, CARD)

NO_DATA_TEXT = "No data"
NO_DESCRIPTION_TEXT = "No description available."


def build_display_data(location, period):
    """
    Resolve the measurement for a period and derive everything shown for it

    The first history entry matching the period wins. A missing entry or an
    unusable value falls back to the "No data" defaults.

    Args:
        location (dict): Normalised location
        period (str): Period label, e.g. "Oct 2025"

    Returns:
        dict: period, value, valText, color, band, explanation, desc, remarks, tubeId
    """
    measurement = find_measurement(location, period) or {}

    value = to_number(measurement.get("val"))
    color, band = classify(value)
    if value is None or value <= 0:
        value = None

    remarks = measurement.get("remarks")
    remarks = remarks.strip() if isinstance(remarks, str) else ""

    desc = (location.get("description") or "").strip() or NO_DESCRIPTION_TEXT
    desc = desc[0].upper() + desc[1:]

    return {
        "period": period,
        "value": value,
        "valText": f"{value:.2f}" if value is not None else NO_DATA_TEXT,
        "color": color,
        "band": band,
        "explanation": explain(value),
        "desc": desc,
        "remarks": remarks,
        "tubeId": measurement.get("tubeId") or "-",
    }


def format_coords(location):
    lat = to_number(location.get("lat"))
    lon = to_number(location.get("lon"))
    if lat is None or lon is None:
        return "-"
    return f"{lat:.6f}, {lon:.6f}"


def render_location(mode, location, data, index=None):
    """
    Build the view model for one location

    Args:
        mode (str): "popup", "overlay" or "card"
        location (dict): Normalised location
        data (dict): Display data from build_display_data
        index (int): Position in the comparison selection, required for cards

    Returns:
        dict: View model
    """
    if mode not in MODES:
        raise ValueError(f"Unknown render mode: {mode}")
    is_card = mode == CARD
    if is_card and index is None:
        raise ValueError("Card mode needs the comparison index")

    if is_card:
        header_action = {"kind": "remove", "index": index}
    elif mode == OVERLAY:
        header_action = {"kind": "close"}
    else:
        header_action = None

    remark = data.get("remarks") or ""
    remark = remark.strip() if isinstance(remark, str) else ""

    return {
        "mode": mode,
        "containerClass": "compare-card" if is_card else "custom-popup",
        "title": location.get("name") or "",
        "headerAction": header_action,
        "tubeId": data.get("tubeId") or "-",
        "coords": format_coords(location),
        "description": None if is_card else (data.get("desc") or None),
        "remark": None if is_card or not remark else remark,
        "period": data.get("period"),
        "value": {
            "label": "NO₂ Concentration",
            "text": data.get("valText", NO_DATA_TEXT),
            "unit": UNIT,
            "color": data.get("color"),
        },
        "explanation": None if is_card else (data.get("explanation") or None),
        "action": None if is_card else {"kind": "compare", "locationId": location.get("locationId")},
    }


def to_html(view):
    """Render a view model as an HTML fragment (all text escaped)"""
    esc = html.escape
    value = view["value"]

    parts = [f'<div class="{esc(view["containerClass"])}">']
    if view["mode"] == CARD:
        parts.append(f'<h4 class="comp-title">{esc(view["title"])}</h4>')
    else:
        parts.append(f'<h3 class="popup-title">{esc(view["title"])}</h3>')
    parts.append(f'<div class="tube-id-wrapper">Tube ID: {esc(str(view["tubeId"]))}</div>')
    parts.append(f'<div class="popup-coords">{esc(view["coords"])}</div>')
    if view["description"]:
        parts.append(f'<div class="popup-desc">{esc(view["description"])}</div>')
    if view["remark"]:
        parts.append(f'<div class="popup-remark">Note: {esc(view["remark"])}</div>')
    parts.append(f'<div class="data-period">{esc(str(view["period"]))}</div>')
    parts.append(
        f'<div class="data-box"><span class="data-label">{esc(value["label"])}</span> '
        f'<span class="data-value" style="color:{esc(value["color"])}">{esc(value["text"])}</span> '
        f'<span class="data-unit">{esc(value["unit"])}</span></div>'
    )
    if view["explanation"]:
        parts.append(f'<div class="data-explanation">{esc(view["explanation"])}</div>')
    parts.append("</div>")
    return "".join(parts)


def to_hover_text(view):
    """Render a view model as Plotly hover text (Plotly only supports a small HTML subset)"""
    esc = html.escape
    value = view["value"]

    lines = [f'<b>{esc(view["title"])}</b>', f'Tube ID: {esc(str(view["tubeId"]))}', esc(view["coords"])]
    if view["description"]:
        lines.append(f'<i>{esc(view["description"])}</i>')
    if view["remark"]:
        lines.append(f'Note: {esc(view["remark"])}')
    lines.append(esc(str(view["period"])))
    lines.append(
        f'{esc(value["label"])}: <span style="color:{esc(value["color"])}"><b>{esc(value["text"])}</b></span> {esc(value["unit"])}'
    )
    if view["explanation"]:
        lines.append(esc(view["explanation"]))
    return "<br>".join(lines)
