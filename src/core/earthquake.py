"""Earthquake data model and feed parsing - Pure functions.

This module turns USGS GeoJSON feature records into typed Earthquake
objects. Every record passes through an explicit validation step: a
well-formed record becomes an Earthquake, anything else is skipped.
All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Earthquake:
    """Immutable normalized seismic event.

    Attributes:
        id: Unique USGS event ID
        magnitude: Event magnitude
        place: Human-readable location description
        time: Event timestamp (UTC)
        latitude: Epicenter latitude (WGS84)
        longitude: Epicenter longitude (WGS84)
        depth_km: Depth in kilometers
        significance: USGS significance score (non-negative)
        tsunami: Whether the tsunami flag is set
        url: USGS event detail URL
    """
    id: str
    magnitude: float
    place: str
    time: datetime
    latitude: float
    longitude: float
    depth_km: float
    significance: int = 0
    tsunami: bool = False
    url: str = ""

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid measurement
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_earthquake(feature: dict[str, Any]) -> Earthquake | None:
    """Parse a single GeoJSON feature into an Earthquake.

    Pure function: takes raw dict, returns typed Earthquake or None if the
    record is missing required fields or has values of the wrong type.

    Args:
        feature: GeoJSON feature dict from the USGS feed

    Returns:
        Earthquake object or None if the record is malformed
    """
    if not isinstance(feature, dict):
        return None

    props = feature.get("properties")
    geometry = feature.get("geometry")
    if not isinstance(props, dict) or not isinstance(geometry, dict):
        return None

    event_id = feature.get("id")
    if not isinstance(event_id, str) or not event_id:
        return None

    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 3:
        return None
    if not all(_is_number(c) for c in coords[:3]):
        return None

    magnitude = props.get("mag")
    time_ms = props.get("time")
    if not _is_number(magnitude) or not _is_number(time_ms):
        return None

    place = props.get("place")
    if not isinstance(place, str) or not place:
        place = "Unknown location"

    significance = props.get("sig")
    if not _is_number(significance) or significance < 0:
        significance = 0

    try:
        # USGS uses milliseconds since epoch
        event_time = datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None

    return Earthquake(
        id=event_id,
        magnitude=float(magnitude),
        place=place,
        time=event_time,
        longitude=float(coords[0]),
        latitude=float(coords[1]),
        depth_km=float(coords[2]),
        significance=int(significance),
        tsunami=bool(props.get("tsunami", 0)),
        url=props.get("url") or "",
    )


def parse_earthquakes(geojson: dict[str, Any]) -> list[Earthquake]:
    """Parse a USGS GeoJSON FeatureCollection into a list of Earthquakes.

    Pure function: malformed features are dropped, well-formed ones keep
    their feed order.

    Args:
        geojson: Full GeoJSON FeatureCollection from the USGS feed

    Returns:
        List of valid Earthquake objects in feed order
    """
    features = geojson.get("features") if isinstance(geojson, dict) else None
    if not isinstance(features, list):
        return []

    earthquakes = []
    for feature in features:
        earthquake = parse_earthquake(feature)
        if earthquake is not None:
            earthquakes.append(earthquake)

    return earthquakes
