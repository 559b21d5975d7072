"""Event filtering - Pure functions.

Narrows an event set by a magnitude floor and a recency window.
The evaluation time is always passed in by the caller; nothing here
reads the wall clock.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from src.core.earthquake import Earthquake


# Bounds of the magnitude slider offered to users
MAX_MIN_MAGNITUDE = 7.0
MAGNITUDE_STEP = 0.5


class TimeWindow(str, Enum):
    """Recency window for filtering."""
    ALL = "all"
    LAST_HOUR = "1h"
    LAST_6_HOURS = "6h"
    LAST_24_HOURS = "24h"

    @property
    def duration(self) -> timedelta | None:
        """Window length, or None for ALL."""
        return _WINDOW_DURATIONS.get(self)


_WINDOW_DURATIONS = {
    TimeWindow.LAST_HOUR: timedelta(hours=1),
    TimeWindow.LAST_6_HOURS: timedelta(hours=6),
    TimeWindow.LAST_24_HOURS: timedelta(hours=24),
}


@dataclass(frozen=True)
class FilterCriteria:
    """User-selected filter criteria.

    The default instance is the "clear all" state: no magnitude floor
    and no time window.

    Attributes:
        min_magnitude: Magnitude floor, 0 means no floor
        time_window: Recency window
    """
    min_magnitude: float = 0.0
    time_window: TimeWindow = TimeWindow.ALL


def parse_filter_criteria(
    min_magnitude: float | str | None = None,
    time_window: str | None = None,
) -> FilterCriteria:
    """Build FilterCriteria from raw UI input.

    Pure function.

    Args:
        min_magnitude: Magnitude floor in [0, 7], multiple of 0.5
        time_window: One of "all", "1h", "6h", "24h"

    Returns:
        Validated FilterCriteria

    Raises:
        ValueError: If either input is outside the recognized values
    """
    if min_magnitude is None or min_magnitude == "":
        magnitude = 0.0
    else:
        try:
            magnitude = float(min_magnitude)
        except TypeError:
            raise ValueError(f"min_magnitude {min_magnitude!r} is not a number") from None

    if not 0 <= magnitude <= MAX_MIN_MAGNITUDE:
        raise ValueError(
            f"min_magnitude {magnitude} out of range [0, {MAX_MIN_MAGNITUDE}]"
        )
    if (magnitude / MAGNITUDE_STEP) != int(magnitude / MAGNITUDE_STEP):
        raise ValueError(
            f"min_magnitude {magnitude} is not a multiple of {MAGNITUDE_STEP}"
        )

    window = TimeWindow(time_window) if time_window else TimeWindow.ALL

    return FilterCriteria(min_magnitude=magnitude, time_window=window)


def apply_filters(
    earthquakes: list[Earthquake] | tuple[Earthquake, ...],
    criteria: FilterCriteria,
    evaluation_time: datetime,
) -> list[Earthquake]:
    """Filter earthquakes by magnitude floor and time window.

    Pure function. Both rules must hold for an event to be kept, and the
    output preserves the relative order of the input.

    Args:
        earthquakes: Events to filter
        criteria: Filter criteria
        evaluation_time: "Now" for the time window

    Returns:
        Filtered list of earthquakes
    """
    cutoff = None
    duration = criteria.time_window.duration
    if duration is not None:
        cutoff = evaluation_time - duration

    result = []
    for earthquake in earthquakes:
        if criteria.min_magnitude > 0 and earthquake.magnitude < criteria.min_magnitude:
            continue
        if cutoff is not None and earthquake.time < cutoff:
            continue
        result.append(earthquake)

    return result
