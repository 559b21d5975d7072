"""Summary statistics - Pure functions.

Computes the aggregate numbers shown on the dashboard and fed into
insight prompts. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from src.core.earthquake import Earthquake


# Events at or above this magnitude count as significant
SIGNIFICANT_MAGNITUDE = 4.5

# Events within this window of the evaluation time count as recent
RECENT_WINDOW = timedelta(hours=1)

# Number of strongest events kept in a summary
TOP_EVENT_COUNT = 5


@dataclass(frozen=True)
class TopEvent:
    """One of the strongest events in a summary.

    Attributes:
        rank: 1-based position by magnitude
        magnitude: Event magnitude
        location: Human-readable place
        depth_km: Depth in kilometers
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        time: Event timestamp (UTC)
    """
    rank: int
    magnitude: float
    location: str
    depth_km: float
    latitude: float
    longitude: float
    time: datetime


@dataclass(frozen=True)
class StatsSummary:
    """Aggregate statistics over an event set at an evaluation time."""
    total: int = 0
    max_magnitude: float = 0.0
    min_magnitude: float = 0.0
    average_magnitude: float = 0.0
    average_depth_km: float = 0.0
    significant_count: int = 0
    recent_count: int = 0
    top_events: tuple[TopEvent, ...] = ()


def rank_top_events(
    earthquakes: list[Earthquake] | tuple[Earthquake, ...],
    limit: int = TOP_EVENT_COUNT,
) -> tuple[TopEvent, ...]:
    """Pick the strongest events, descending by magnitude.

    Pure function. sorted() is stable, so equal magnitudes keep their
    original order.
    """
    strongest = sorted(earthquakes, key=lambda e: e.magnitude, reverse=True)[:limit]

    return tuple(
        TopEvent(
            rank=i,
            magnitude=e.magnitude,
            location=e.place,
            depth_km=e.depth_km,
            latitude=e.latitude,
            longitude=e.longitude,
            time=e.time,
        )
        for i, e in enumerate(strongest, start=1)
    )


def summarize(
    earthquakes: list[Earthquake] | tuple[Earthquake, ...],
    evaluation_time: datetime,
) -> StatsSummary:
    """Compute a StatsSummary over an event set.

    Pure function. An empty input yields an all-zero summary.

    Args:
        earthquakes: Events to summarize
        evaluation_time: "Now" for the recent-activity window

    Returns:
        StatsSummary for the events
    """
    if not earthquakes:
        return StatsSummary()

    total = len(earthquakes)
    magnitudes = [e.magnitude for e in earthquakes]
    recent_cutoff = evaluation_time - RECENT_WINDOW

    return StatsSummary(
        total=total,
        max_magnitude=max(magnitudes),
        min_magnitude=min(magnitudes),
        average_magnitude=sum(magnitudes) / total,
        average_depth_km=sum(e.depth_km for e in earthquakes) / total,
        significant_count=sum(1 for m in magnitudes if m >= SIGNIFICANT_MAGNITUDE),
        recent_count=sum(1 for e in earthquakes if e.time >= recent_cutoff),
        top_events=rank_top_events(earthquakes),
    )


def get_activity_level(recent_count: int) -> str:
    """Label last-hour activity.

    Pure function.
    """
    if recent_count >= 10:
        return "High"
    elif recent_count >= 5:
        return "Moderate"
    else:
        return "Low"


def get_magnitude_class(magnitude: float) -> str:
    """Get the magnitude scale bucket used by the map legend.

    Pure function.
    """
    if magnitude >= 5.0:
        return "Moderate to Major"
    elif magnitude >= 3.0:
        return "Light"
    else:
        return "Minor"


def get_significance_level(significance: int) -> str:
    """Label a USGS significance score.

    Pure function.
    """
    if significance >= 600:
        return "High"
    elif significance >= 300:
        return "Moderate"
    else:
        return "Low"


def summary_to_dict(summary: StatsSummary) -> dict[str, Any]:
    """Convert a StatsSummary to a JSON-serializable dict.

    Pure function.
    """
    return {
        "total": summary.total,
        "magnitude_range": {
            "min": round(summary.min_magnitude, 1),
            "max": round(summary.max_magnitude, 1),
        },
        "average_magnitude": round(summary.average_magnitude, 2),
        "average_depth_km": round(summary.average_depth_km, 1),
        "significant_count": summary.significant_count,
        "recent_count": summary.recent_count,
        "activity_level": get_activity_level(summary.recent_count),
        "top_events": [
            {
                "rank": t.rank,
                "magnitude": t.magnitude,
                "location": t.location,
                "depth_km": t.depth_km,
                "coordinates": {
                    "latitude": t.latitude,
                    "longitude": t.longitude,
                },
                "time": t.time.isoformat(),
            }
            for t in summary.top_events
        ],
    }
