"""NO2 diffusion tube map: period-synchronised map, table and comparison views."""

__version__ = "0.1.0"
