from tubemap.periods import build_period_index


def empty_filters():
    return {"text": "", "min": None, "max": None, "hideNoData": False}


class AppState:
    """
    Everything the dashboard controllers read and write

    The location snapshot and its period index are fixed at construction.
    ``selected_period`` is written only through the time control.
    """

    def __init__(self, locations, periods=None):
        self.locations = locations
        self.periods = build_period_index(locations) if periods is None else periods

        # Time control
        self.selected_period = None
        self.slider_index = None
        self.year = None
        self.month = None

        # Map
        self.markers = []
        self.popup = None
        self.overlay = None
        self.recenter = None

        # Table
        self.current_rows = []
        self.filters = empty_filters()

        # Comparison
        self.selection = []
        self.dock_visible = False
        self.comparison_open = False
        self.cards = []

    def find_location(self, location_id):
        for location in self.locations:
            if location.get("locationId") == location_id:
                return location
        return None
