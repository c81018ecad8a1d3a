import hashlib
import logging
import math

import plotly.graph_objects as go

from tubemap.classify import to_number
from tubemap.config import (
    FLY_DURATION,
    MAP_CENTER,
    MAP_STYLE,
    MAP_ZOOM,
    MARKER_SIZE,
    MOBILE_BREAKPOINT,
    OVERLAY_OFFSET_FRACTION,
    VIEWPORT_WIDTH,
)
from tubemap.render import OVERLAY, POPUP, build_display_data, render_location, to_hover_text

logger = logging.getLogger(__name__)

MAP_HEIGHT = 600


def valid_coordinates(location):
    """(lat, lon) as floats, or None when either is missing or zero"""
    lat = to_number(location.get("lat"))
    lon = to_number(location.get("lon"))
    if not lat or not lon:
        return None
    return lat, lon


class MapController:
    """Owns the live marker set; every period change rebuilds it from scratch"""

    def __init__(self, state, table=None):
        self.state = state
        self.table = table

    def set_period(self, period):
        """
        Switch the map (and the table) to a period

        Args:
            period (str): Period label

        Returns:
            list: The rebuilt markers
        """
        state = self.state
        state.selected_period = period

        if self.table is not None:
            self.table.render_table_for_month(period)

        # Tear down everything, open popups included
        state.markers = []
        state.popup = None

        markers = []
        for location in state.locations:
            coords = valid_coordinates(location)
            if coords is None:
                continue

            data = build_display_data(location, period)
            markers.append({
                "locationId": location.get("locationId"),
                "lat": coords[0],
                "lon": coords[1],
                "color": data["color"],
                "data": data,
                "popup": render_location(POPUP, location, data),
            })

        state.markers = markers
        logger.debug(f"Rendered {len(markers)} markers for {period}")
        return markers

    def find_marker(self, location_id):
        for marker in self.state.markers:
            if marker["locationId"] == location_id:
                return marker
        return None

    def click_marker(self, location_id, viewport_width=VIEWPORT_WIDTH):
        """
        Handle a click on a marker

        Wide viewports show the marker's popup. Narrow ones suppress it and
        open the overlay panel instead, recentring the map so the panel does
        not cover the marker.

        Returns:
            dict: The view model shown, or None for an unknown marker
        """
        marker = self.find_marker(location_id)
        if marker is None:
            return None

        state = self.state
        if viewport_width >= MOBILE_BREAKPOINT:
            state.popup = marker["popup"]
            return state.popup

        location = state.find_location(location_id)
        state.popup = None
        state.overlay = render_location(OVERLAY, location, marker["data"])
        state.recenter = {
            "lat": marker["lat"],
            "lon": marker["lon"],
            "offset_fraction": OVERLAY_OFFSET_FRACTION,
            "duration": FLY_DURATION,
        }
        return state.overlay

    def dismiss_overlay(self):
        """Background click: close the overlay panel"""
        self.state.overlay = None
        self.state.recenter = None

    def close_popup(self):
        self.state.popup = None


def offset_center(lat, lon, zoom=MAP_ZOOM, height=MAP_HEIGHT, fraction=OVERLAY_OFFSET_FRACTION):
    """
    Map centre that puts (lat, lon) a fraction of the map height above the middle

    Uses the Web Mercator scale of 256 px tiles at the given zoom.
    """
    offset_px = height * fraction
    degrees_per_px = 360.0 / (256 * 2 ** zoom) * math.cos(math.radians(lat))
    return {"lat": lat - offset_px * degrees_per_px, "lon": lon}


def build_map_figure(markers, recenter=None, style=MAP_STYLE, zoom=MAP_ZOOM, height=MAP_HEIGHT):
    """
    Plotly map of the current markers

    Args:
        markers (list): Markers from MapController.set_period
        recenter (dict): Optional recentre request from a narrow-viewport click
        style (str): Map tile style
        zoom (float): Zoom level
        height (int): Figure height in px

    Returns:
        go.Figure: Figure whose points carry the location id as customdata
    """
    if recenter:
        center = offset_center(recenter["lat"], recenter["lon"], zoom, height, recenter["offset_fraction"])
    else:
        center = dict(MAP_CENTER)

    fig = go.Figure()

    # White halo under each marker
    fig.add_trace(go.Scattermap(
        lat=[m["lat"] for m in markers],
        lon=[m["lon"] for m in markers],
        mode="markers",
        marker=dict(size=MARKER_SIZE + 2, color="#fff"),
        hoverinfo="skip",
        showlegend=False,
    ))
    fig.add_trace(go.Scattermap(
        lat=[m["lat"] for m in markers],
        lon=[m["lon"] for m in markers],
        mode="markers",
        marker=dict(size=MARKER_SIZE, color=[m["color"] for m in markers], opacity=0.8),
        customdata=[m["locationId"] for m in markers],
        hovertext=[to_hover_text(m["popup"]) for m in markers],
        hovertemplate="%{hovertext}<extra></extra>",
        showlegend=False,
    ))

    fig.update_layout(
        map={
            "style": style,
            "center": center,
            "zoom": zoom,
        },
        margin={"r": 0, "t": 0, "l": 0, "b": 0},
        height=height,
        hoverlabel=dict(bgcolor="white", font=dict(size=13, color="#2C3E50")),
        clickmode="event+select",
        # Keep pan/zoom across reruns unless a recentre was requested
        uirevision=None if recenter else "tubemap",
    )
    if recenter:
        fig.update_layout(transition={"duration": int(recenter["duration"] * 1000), "easing": "cubic-in-out"})
    return fig


def figure_signature(fig):
    """Digest of the figure spec; Streamlit recreates the chart widget when it changes"""
    return hashlib.md5(fig.to_json().encode("utf-8")).hexdigest()


class MapClickTracker:
    """
    Turns the chart's point selection, read on every rerun, into click events

    A recreated chart starts with an empty selection, so an empty selection
    only counts as a background click while the figure is unchanged.
    """

    def __init__(self):
        self.signature = None
        self.last_pick = None

    def update(self, signature, picked):
        """
        Args:
            signature (str): figure_signature of the chart just drawn
            picked (str): Location id of the selected point, or None

        Returns:
            tuple: ("click", location_id), ("dismiss", None) or None when nothing happened
        """
        if signature != self.signature:
            self.signature = signature
            self.last_pick = None
            if picked is None:
                return None

        if picked == self.last_pick:
            return None
        self.last_pick = picked
        if picked is None:
            return ("dismiss", None)
        return ("click", picked)
