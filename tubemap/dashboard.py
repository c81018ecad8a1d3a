from tubemap.compare import ComparisonController
from tubemap.map_view import MapController
from tubemap.state import AppState
from tubemap.table import TableController
from tubemap.time_control import TimeControl


class Dashboard:
    """Application state plus the controllers wired around it"""

    def __init__(self, locations):
        self.state = AppState(locations)
        self.table = TableController(self.state)
        self.map = MapController(self.state, self.table)
        self.compare = ComparisonController(self.state)
        self.time = TimeControl(self.state, self.map.set_period)

    def start(self):
        return self.time.start()
