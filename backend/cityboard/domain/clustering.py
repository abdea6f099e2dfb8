from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping

from .geohash import encode
from .models import ClusterPin, MapPin


def unique_events(rows: Iterable[Mapping]) -> List[Mapping]:
    """Collapse rows sharing an event id, keeping the first occurrence.

    A category join returns an event once per matching category.
    """
    seen = set()
    unique = []
    for row in rows:
        event_id = str(row["id"])
        if event_id in seen:
            continue
        seen.add(event_id)
        unique.append(row)
    return unique


def cluster_events(rows: Iterable[Mapping], precision: int) -> List[ClusterPin]:
    buckets: Dict[str, Dict[str, float]] = defaultdict(lambda: {"count": 0, "lat": 0.0, "lng": 0.0})

    for row in unique_events(rows):
        lat = row["lat"]
        lng = row["lng"]
        if lat is None or lng is None:
            continue
        bucket = buckets[encode(lat, lng, precision)]
        bucket["count"] += 1
        bucket["lat"] += lat
        bucket["lng"] += lng

    # centroid is the mean of member coordinates, not the cell center
    return [
        ClusterPin(
            geohash=key,
            count=data["count"],
            lat=data["lat"] / data["count"],
            lng=data["lng"] / data["count"],
        )
        for key, data in buckets.items()
    ]


def map_pins(rows: Iterable[Mapping]) -> List[MapPin]:
    return [
        MapPin(id=str(row["id"]), lat=row["lat"], lng=row["lng"])
        for row in unique_events(rows)
        if row["lat"] is not None and row["lng"] is not None
    ]
