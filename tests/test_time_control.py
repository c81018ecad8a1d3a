from tubemap.dashboard import Dashboard
from tubemap.state import AppState
from tubemap.time_control import TimeControl


def test_start_selects_latest_period(dashboard):
    state = dashboard.state
    assert state.slider_index == 3
    assert state.selected_period == "Nov 2025"
    assert (state.month, state.year) == ("Nov", "2025")


def test_sync_all_keeps_controls_consistent(dashboard):
    assert dashboard.time.sync_all("0") == "Dec 2024"
    state = dashboard.state
    assert state.slider_index == 0
    assert state.year == "2024"
    assert state.month == "Dec"
    assert state.selected_period == "Dec 2024"
    assert state.current_rows[0]["period"] == "Dec 2024"


def test_year_change_jumps_to_first_period_of_year(dashboard):
    dashboard.time.sync_all(0)
    assert dashboard.time.select_year("2025") == "Sep 2025"

    state = dashboard.state
    assert state.slider_index == 1
    assert state.month == "Sep"
    assert state.year == "2025"
    assert {m["data"]["period"] for m in state.markers} == {"Sep 2025"}


def test_select_period(dashboard):
    assert dashboard.time.select_period("Oct 2025") == "Oct 2025"
    assert dashboard.state.slider_index == 2
    assert dashboard.time.select_period("Jan 1999") is None
    assert dashboard.state.selected_period == "Oct 2025"


def test_out_of_range_index_is_ignored(dashboard):
    assert dashboard.time.sync_all(17) is None
    assert dashboard.time.sync_all(-1) is None
    assert dashboard.time.sync_all("late") is None
    assert dashboard.state.selected_period == "Nov 2025"


def test_unknown_year(dashboard):
    assert dashboard.time.select_year("1990") is None


def test_years(dashboard):
    assert dashboard.time.years == ["2024", "2025"]


def test_every_change_reaches_the_listener():
    seen = []
    state = AppState([], periods=["Jan 2025", "Feb 2025"])
    control = TimeControl(state, seen.append)
    control.start()
    control.sync_all(0)
    control.sync_all(1)
    assert seen == ["Feb 2025", "Jan 2025", "Feb 2025"]


def test_empty_feed_leaves_ui_inert():
    dashboard = Dashboard([])
    assert dashboard.start() is None
    assert dashboard.state.selected_period is None
    assert dashboard.state.markers == []
