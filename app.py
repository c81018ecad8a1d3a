import logging

import streamlit as st

from tubemap.classify import legend_entries, reference_caption
from tubemap.compare import ComparisonError
from tubemap.config import LOCATIONS_API_URL, LOG_LEVEL, MOBILE_BREAKPOINT, UNIT, VIEWPORT_WIDTH
from tubemap.dashboard import Dashboard
from tubemap.feed import fetch_locations
from tubemap.map_view import MapClickTracker, build_map_figure, figure_signature
from tubemap.render import to_html

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title="NO₂ Tube Monitoring Map",
    page_icon="🌬️",
    layout="wide"
)

st.title("🌬️ NO₂ Diffusion Tube Monitoring")
st.subheader("Monthly nitrogen dioxide concentrations per sampling location")

CARD_CSS = """
<style>
.custom-popup, .compare-card {border:1px solid #e5e7eb; border-radius:8px; padding:12px; background:#fff;}
.popup-title, .comp-title {margin:0 0 4px 0;}
.tube-id-wrapper, .popup-coords {color:#6b7280; font-size:0.85rem;}
.popup-desc {margin-top:8px;}
.popup-remark {margin-top:6px; font-style:italic; color:#92400e;}
.data-period {margin-top:8px; font-weight:600;}
.data-value {font-size:1.6rem; font-weight:700;}
.data-explanation {margin-top:4px; color:#374151;}
</style>
"""


def get_dashboard():
    """
    Load the location snapshot once per session and wire the controllers

    Returns:
        Dashboard: The session's dashboard, or None if the feed could not be loaded
    """
    if 'dashboard' in st.session_state:
        return st.session_state['dashboard']

    with st.spinner("Loading locations..."):
        locations = fetch_locations(LOCATIONS_API_URL)

    if locations is None:
        logger.error("Location feed unavailable, dashboard left inert")
        return None

    dashboard = Dashboard(locations)
    period = dashboard.start()
    logger.info(f"Dashboard ready: {len(locations)} locations, starting at {period}")
    st.session_state['dashboard'] = dashboard
    sync_time_widgets(dashboard)
    return dashboard


def sync_time_widgets(dashboard):
    """Push the time control's state into the slider and dropdown widgets"""
    state = dashboard.state
    if state.slider_index is None:
        return
    st.session_state['period_slider'] = state.slider_index
    st.session_state['year_select'] = state.year
    st.session_state['period_select'] = state.selected_period


# --------------------------
# Widget callbacks
# --------------------------
def on_slider_change():
    dashboard = st.session_state['dashboard']
    dashboard.time.sync_all(st.session_state['period_slider'])
    sync_time_widgets(dashboard)


def on_year_change():
    dashboard = st.session_state['dashboard']
    dashboard.time.select_year(st.session_state['year_select'])
    sync_time_widgets(dashboard)


def on_period_change():
    dashboard = st.session_state['dashboard']
    dashboard.time.select_period(st.session_state['period_select'])
    sync_time_widgets(dashboard)


def on_filter_change():
    dashboard = st.session_state['dashboard']
    dashboard.table.set_filters(
        text=st.session_state['q_filter'],
        min=st.session_state['min_no2'],
        max=st.session_state['max_no2'],
        hideNoData=st.session_state['hide_no_data'],
    )


def on_reset_filters():
    dashboard = st.session_state['dashboard']
    st.session_state['q_filter'] = ""
    st.session_state['min_no2'] = ""
    st.session_state['max_no2'] = ""
    st.session_state['hide_no_data'] = False
    dashboard.table.reset_filters()


def on_add_to_compare(location_id):
    dashboard = st.session_state['dashboard']
    try:
        dashboard.compare.toggle(location_id)
    except ComparisonError as e:
        st.session_state['compare_alert'] = str(e)


def on_remove_from_compare(index):
    st.session_state['dashboard'].compare.remove(index)


# --------------------------
# Sections
# --------------------------
def render_time_control(dashboard):
    state = dashboard.state
    periods = state.periods

    if not periods:
        st.warning("No data available")
        return

    col_label, col_year, col_period = st.columns([2, 1, 1])
    with col_label:
        st.markdown(f"**Period:** {state.month} {state.year}")
    with col_year:
        st.selectbox("Year", dashboard.time.years, key='year_select', on_change=on_year_change)
    with col_period:
        st.selectbox("Period", periods, key='period_select', on_change=on_period_change)

    # A slider needs at least two positions
    if len(periods) > 1:
        st.slider(
            "Oldest → Newest",
            min_value=0,
            max_value=len(periods) - 1,
            step=1,
            key='period_slider',
            on_change=on_slider_change,
        )


def handle_map_event(dashboard, event, signature):
    """Turn a Plotly point selection into a marker click or a background click"""
    points = []
    if event and event.selection:
        points = [p for p in event.selection.get("points", []) if p.get("customdata")]

    picked = points[0]["customdata"] if points else None
    if isinstance(picked, (list, tuple)):
        picked = picked[0]

    tracker = st.session_state.setdefault('map_clicks', MapClickTracker())
    action = tracker.update(signature, picked)
    if action is None:
        return

    kind, location_id = action
    if kind == "dismiss":
        dashboard.map.dismiss_overlay()
        dashboard.map.close_popup()
    else:
        dashboard.map.click_marker(location_id, VIEWPORT_WIDTH)

    # Redraw so the recentred figure and the panel show together
    st.rerun()


def render_location_panel(view, key_prefix, on_close):
    st.markdown(to_html(view), unsafe_allow_html=True)
    action = view["action"]
    col_add, col_close = st.columns(2)
    with col_add:
        if action:
            st.button(
                "+ Add to compare",
                key=f"{key_prefix}_add_{action['locationId']}",
                on_click=on_add_to_compare,
                args=(action['locationId'],),
            )
    with col_close:
        st.button("×", key=f"{key_prefix}_close", on_click=on_close)


def render_map(dashboard):
    state = dashboard.state
    fig = build_map_figure(state.markers, state.recenter)
    event = st.plotly_chart(
        fig,
        use_container_width=True,
        on_select="rerun",
        selection_mode="points",
        key="tube_map",
    )
    handle_map_event(dashboard, event, figure_signature(fig))

    if state.overlay:
        render_location_panel(state.overlay, "overlay", dashboard.map.dismiss_overlay)
    elif state.popup:
        render_location_panel(state.popup, "popup", dashboard.map.close_popup)

    with st.expander("Legend (NO₂ annual mean, µg/m³)"):
        for entry in legend_entries():
            st.markdown(
                f'<span style="display:inline-block;width:14px;height:14px;border-radius:50%;'
                f'background:{entry["color"]};margin-right:8px"></span>{entry["label"]}',
                unsafe_allow_html=True,
            )
        st.caption(reference_caption(UNIT))


def render_comparison(dashboard):
    state = dashboard.state

    if 'compare_alert' in st.session_state:
        st.warning(st.session_state.pop('compare_alert'))

    if state.dock_visible:
        col_count, col_show, col_clear = st.columns([2, 1, 1])
        with col_count:
            st.info(dashboard.compare.dock_label())
        with col_show:
            st.button("Compare", key="compare_show", on_click=dashboard.compare.show, type="primary")
        with col_clear:
            st.button("Clear", key="compare_clear", on_click=dashboard.compare.clear)

    if state.comparison_open and state.cards and state.selection:
        st.markdown("### Comparison")
        card_cols = st.columns(len(state.cards))
        for col, card in zip(card_cols, state.cards):
            with col:
                st.markdown(to_html(card), unsafe_allow_html=True)
                index = card["headerAction"]["index"]
                st.button("× Remove", key=f"compare_remove_{index}", on_click=on_remove_from_compare, args=(index,))
        st.button("Close comparison", key="compare_close", on_click=dashboard.compare.close)


def render_table(dashboard):
    st.markdown("### Measurements")

    filter_cols = st.columns([2, 1, 1, 1, 1])
    with filter_cols[0]:
        st.text_input("Search location", key='q_filter', on_change=on_filter_change)
    with filter_cols[1]:
        st.text_input(f"Min NO₂ ({UNIT})", key='min_no2', on_change=on_filter_change)
    with filter_cols[2]:
        st.text_input(f"Max NO₂ ({UNIT})", key='max_no2', on_change=on_filter_change)
    with filter_cols[3]:
        st.checkbox("Hide no data", key='hide_no_data', on_change=on_filter_change)
    with filter_cols[4]:
        st.button("Reset filters", on_click=on_reset_filters)

    rows = dashboard.table.visible_rows()
    if not rows:
        st.caption("No results")
        return

    st.dataframe(
        dashboard.table.to_frame(rows),
        use_container_width=True,
        hide_index=True
    )


def render_summary(dashboard):
    state = dashboard.state
    values = [r["no2"] for r in state.current_rows if r["no2"] is not None]

    metrics_cols = st.columns(4)
    with metrics_cols[0]:
        st.metric("Locations", len(state.locations))
    with metrics_cols[1]:
        st.metric("Periods", len(state.periods))
    with metrics_cols[2]:
        st.metric("With data", len(values))
    with metrics_cols[3]:
        avg = f"{sum(values) / len(values):.1f} {UNIT}" if values else "-"
        st.metric("Avg Value", avg)


def main():
    """Main application logic"""
    st.markdown(CARD_CSS, unsafe_allow_html=True)

    dashboard = get_dashboard()
    if dashboard is None:
        st.error(f"Failed to load locations from {LOCATIONS_API_URL}")
        st.stop()

    col1, col2 = st.columns([2, 1])

    with col2:
        st.info("""
        **About this application:**

        Monthly NO₂ concentrations measured with passive diffusion tubes.
        Move the slider or pick a year/period to scrub through time;
        click a location to see its details and add it to the comparison.

        **Reference values (annual mean):**
        - EU limit: 40 μg/m³
        - WHO target: 10 μg/m³
        """)
        render_comparison(dashboard)

    with col1:
        render_time_control(dashboard)
        if VIEWPORT_WIDTH < MOBILE_BREAKPOINT:
            st.caption("Compact layout: details open below the map")
        render_map(dashboard)

    st.markdown("---")
    render_summary(dashboard)
    render_table(dashboard)


if __name__ == "__main__":
    main()
