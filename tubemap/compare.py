import logging

from tubemap.config import MAX_COMPARE
from tubemap.render import CARD, build_display_data, render_location

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "This location from this period is already in the comparison."
LIMIT_MESSAGE = f"You can compare a maximum of {MAX_COMPARE} locations."


class ComparisonError(ValueError):
    """Rejected comparison request; the message is meant for the user"""


class ComparisonController:
    """Bounded selection of (location, period) pairs shown side by side"""

    def __init__(self, state):
        self.state = state

    def toggle(self, location_id):
        """
        Add a location at the selected period to the comparison

        Raises:
            ComparisonError: The pair is already selected or the tray is full.
            The selection is left untouched.
        """
        state = self.state
        period = state.selected_period

        for item in state.selection:
            if item["locationId"] == location_id and item["period"] == period:
                raise ComparisonError(DUPLICATE_MESSAGE)
        if len(state.selection) >= MAX_COMPARE:
            raise ComparisonError(LIMIT_MESSAGE)

        state.selection.append({"locationId": location_id, "period": period})
        state.dock_visible = True

        # Adding closes whatever detail view the click came from
        state.overlay = None
        state.recenter = None
        state.popup = None

        logger.info(f"Added {location_id} ({period}) to comparison")
        return list(state.selection)

    def remove(self, index):
        state = self.state
        if not 0 <= index < len(state.selection):
            return list(state.selection)

        removed = state.selection.pop(index)
        logger.info(f"Removed {removed['locationId']} ({removed['period']}) from comparison")

        if not state.selection:
            self.close()
            self.clear()
        else:
            self.show()
        return list(state.selection)

    def show(self):
        """
        Open the comparison view with one card per selected item

        Measurements are looked up again from the snapshot for each item's own
        period, not the currently selected one.
        """
        state = self.state
        cards = []
        for index, item in enumerate(state.selection):
            location = state.find_location(item["locationId"])
            if location is None:
                continue
            data = build_display_data(location, item["period"])
            cards.append(render_location(CARD, location, data, index))

        state.cards = cards
        state.comparison_open = True
        return cards

    def clear(self):
        self.state.selection = []
        self.state.dock_visible = False

    def close(self):
        self.state.comparison_open = False
        self.state.cards = []

    def dock_label(self):
        return f"{len(self.state.selection)} location(s) selected"
