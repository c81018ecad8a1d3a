def build_period_index(locations):
    """
    Derive the ordered list of distinct period labels across all locations

    A label shared by several locations sits at the earliest raw date seen for
    it. Entries without a parsed raw date are ignored. Labels with equal dates
    keep their first-seen order.

    Args:
        locations (list): Normalised locations

    Returns:
        list: Period labels, oldest first
    """
    earliest = {}
    for location in locations:
        for entry in location.get("history", []):
            label = entry.get("dateStr")
            raw_date = entry.get("rawDate")
            if not label or raw_date is None:
                continue
            seen = earliest.get(label)
            if seen is None or raw_date < seen:
                earliest[label] = raw_date

    ordered = sorted(earliest.items(), key=lambda item: item[1])
    return [label for label, _ in ordered]


def split_period(label):
    """Split "Oct 2025" into ("Oct", "2025")"""
    month, _, year = label.partition(" ")
    return month, year


def unique_years(periods):
    """Years present in the period index, in order of first appearance"""
    years = []
    for label in periods:
        _, year = split_period(label)
        if year and year not in years:
            years.append(year)
    return years


def find_measurement(location, period):
    """First history entry of a location matching the period label, or None"""
    for entry in location.get("history", []):
        if entry.get("dateStr") == period:
            return entry
    return None
