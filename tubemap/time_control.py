import logging

from tubemap.periods import split_period, unique_years

logger = logging.getLogger(__name__)


class TimeControl:
    """
    Slider, year dropdown, month display and period dropdown over one period index

    Every change goes through ``sync_all`` so the four controls always agree,
    then hands the period to ``on_period_change``.
    """

    def __init__(self, state, on_period_change):
        self.state = state
        self.on_period_change = on_period_change

    @property
    def periods(self):
        return self.state.periods

    @property
    def years(self):
        return unique_years(self.state.periods)

    def sync_all(self, index):
        """
        Select the period at a slider index

        Returns:
            str: The selected period, or None for an out-of-range index
        """
        try:
            index = int(index)
        except (TypeError, ValueError):
            return None
        if not 0 <= index < len(self.periods):
            return None

        period = self.periods[index]
        month, year = split_period(period)

        state = self.state
        state.slider_index = index
        if state.year != year:
            state.year = year
        state.month = month

        logger.debug(f"Period changed to {period}")
        self.on_period_change(period)
        return period

    def select_year(self, year):
        """Jump to the first period of a year"""
        year = str(year)
        for index, period in enumerate(self.periods):
            if year in period:
                return self.sync_all(index)
        return None

    def select_period(self, period):
        if period not in self.periods:
            return None
        return self.sync_all(self.periods.index(period))

    def start(self):
        """Initial state: the latest period"""
        if not self.periods:
            logger.warning("No periods in the location feed")
            return None
        return self.sync_all(len(self.periods) - 1)
