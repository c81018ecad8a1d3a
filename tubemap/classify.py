import math

from tubemap.config import NO_DATA_COLOR

EU_EXCEEDANCE = "EU_EXCEEDANCE"
WHO_EXCEEDANCE = "WHO_EXCEEDANCE"
WHO_OK = "WHO_OK"
NO_DATA = "NO_DATA"

EU_ANNUAL_LIMIT = 40
WHO_ANNUAL_TARGET = 10

# (lower bound, colour, band), checked highest first
COLOR_SCALE = [
    (80, "#7E0023", EU_EXCEEDANCE),
    (70, "#8F3F97", EU_EXCEEDANCE),
    (60, "#C92033", EU_EXCEEDANCE),
    (50, "#DA5634", EU_EXCEEDANCE),
    (EU_ANNUAL_LIMIT, "#EA8C34", EU_EXCEEDANCE),
    (30, "#ECAA33", WHO_EXCEEDANCE),
    (20, "#EEC732", WHO_EXCEEDANCE),
    (WHO_ANNUAL_TARGET, "#A3BF29", WHO_EXCEEDANCE),
]
WITHIN_TARGET_COLOR = "#59B61F"

EXPLANATIONS = {
    EU_EXCEEDANCE: "Above EU annual limit",
    WHO_EXCEEDANCE: "Above WHO annual target",
    WHO_OK: "Within WHO annual target",
    NO_DATA: "",
}


def to_number(value):
    """
    Coerce a raw measurement value to a float

    Returns:
        float or None: None for absent, blank, non-numeric or non-finite values
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def get_color(value):
    """Colour of the scale for a numeric concentration (µg/m³)"""
    for lower, color, _ in COLOR_SCALE:
        if value > lower:
            return color
    return WITHIN_TARGET_COLOR


def classify(value):
    """
    Map a concentration to its severity colour and band

    Args:
        value: Raw concentration in µg/m³ (anything; invalid input is "no data")

    Returns:
        tuple: (colour, band) where band is one of EU_EXCEEDANCE,
        WHO_EXCEEDANCE, WHO_OK or NO_DATA
    """
    number = to_number(value)
    if number is None or number <= 0:
        return NO_DATA_COLOR, NO_DATA

    for lower, color, band in COLOR_SCALE:
        if number > lower:
            return color, band
    return WITHIN_TARGET_COLOR, WHO_OK


def explain(value):
    """Explanation text for a concentration, empty when there is no data"""
    _, band = classify(value)
    return EXPLANATIONS[band]


def legend_entries():
    """
    Legend rows for the colour scale, highest band first

    Returns:
        list: dicts with color, label and band, ending with the no-data entry
    """
    entries = []
    upper = None
    for lower, color, band in COLOR_SCALE:
        label = f"> {lower}" if upper is None else f"{lower}-{upper}"
        entries.append({"color": color, "label": label, "band": band})
        upper = lower
    entries.append({"color": WITHIN_TARGET_COLOR, "label": f"0-{upper}", "band": WHO_OK})
    entries.append({"color": NO_DATA_COLOR, "label": "No data", "band": NO_DATA})
    return entries


def reference_caption(unit="µg/m³"):
    return f"EU annual limit {EU_ANNUAL_LIMIT} {unit} · WHO annual target {WHO_ANNUAL_TARGET} {unit}"
