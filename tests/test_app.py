from pathlib import Path

from streamlit.testing.v1 import AppTest

from tubemap.dashboard import Dashboard

APP_PATH = Path(__file__).resolve().parent.parent / "app.py"


def open_app(locations, location_id=None):
    dashboard = Dashboard(locations)
    dashboard.start()
    if location_id:
        dashboard.map.click_marker(location_id, viewport_width=375)

    at = AppTest.from_file(str(APP_PATH), default_timeout=30)
    at.session_state["dashboard"] = dashboard
    at.session_state["period_slider"] = dashboard.state.slider_index
    at.session_state["year_select"] = dashboard.state.year
    at.session_state["period_select"] = dashboard.state.selected_period
    at.run()
    assert not at.exception
    return at


def test_overlay_survives_unrelated_reruns(locations):
    at = open_app(locations, "KS-01")

    at.text_input(key="q_filter").input("adum").run()
    assert not at.exception
    at.checkbox(key="hide_no_data").check().run()
    assert not at.exception

    state = at.session_state["dashboard"].state
    assert state.overlay is not None
    assert state.overlay["title"] == "Adum Market"
    assert state.recenter is not None
    assert any("Adum Market" in md.value for md in at.markdown)


def test_overlay_close_button_dismisses_it(locations):
    at = open_app(locations, "KS-01")

    at.button(key="overlay_close").click().run()
    assert not at.exception

    state = at.session_state["dashboard"].state
    assert state.overlay is None
    assert state.recenter is None

    # The redrawn chart's empty selection must not count as another click
    at.run()
    assert at.session_state["dashboard"].state.overlay is None


def test_period_change_keeps_overlay_open(locations):
    at = open_app(locations, "KS-01")

    at.selectbox(key="period_select").select("Oct 2025").run()
    assert not at.exception

    state = at.session_state["dashboard"].state
    assert state.selected_period == "Oct 2025"
    assert state.overlay is not None
