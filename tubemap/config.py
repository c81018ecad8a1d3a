import os

# API endpoint serving the locations with their embedded measurement history
LOCATIONS_API_URL = os.getenv("TUBEMAP_API_URL", "http://localhost:3000/api/locations")
FEED_TIMEOUT = float(os.getenv("TUBEMAP_FEED_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("TUBEMAP_LOG_LEVEL", "INFO")

# Map display
MAP_STYLE = os.getenv("TUBEMAP_MAP_STYLE", "carto-positron")
MAP_CENTER = {"lat": 6.6596, "lon": -1.6063}  # Kumasi
MAP_ZOOM = 12
MARKER_SIZE = 24

# Streamlit cannot read the browser width, so the layout is chosen up front
VIEWPORT_WIDTH = int(os.getenv("TUBEMAP_VIEWPORT_WIDTH", "1280"))
MOBILE_BREAKPOINT = 768
OVERLAY_OFFSET_FRACTION = 0.25
FLY_DURATION = 0.2

# Comparison tray
MAX_COMPARE = 2

NO_DATA_COLOR = "#ccc"
UNIT = "µg/m³"
