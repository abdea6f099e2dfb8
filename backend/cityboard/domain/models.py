from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class EventStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"


class InvalidViewportError(ValueError):
    pass


class InvalidDateRangeError(ValueError):
    pass


@dataclass(frozen=True)
class Viewport:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self):
        for name in ("min_lat", "max_lat"):
            value = getattr(self, name)
            if not -90.0 <= value <= 90.0:
                raise InvalidViewportError(f"{name}: latitude must be in range [-90, 90]")
        for name in ("min_lng", "max_lng"):
            value = getattr(self, name)
            if not -180.0 <= value <= 180.0:
                raise InvalidViewportError(f"{name}: longitude must be in range [-180, 180]")
        if self.min_lat > self.max_lat:
            raise InvalidViewportError("minLat must not be greater than maxLat")
        if self.min_lng > self.max_lng:
            raise InvalidViewportError("minLng must not be greater than maxLng")

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


@dataclass(frozen=True)
class DateRange:
    """Inclusive bounds on the event date/time; either side may be open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def from_bounds(cls, start: Optional[datetime], end: Optional[datetime]) -> "DateRange":
        if start is not None and end is not None and start > end:
            raise InvalidDateRangeError("fromDate must not be after toDate")
        return cls(start=start, end=end)

    def not_before(self, floor: datetime) -> "DateRange":
        """Raise the lower bound to ``floor``; the range may end up empty."""
        if self.start is not None and self.start >= floor:
            return self
        return DateRange(start=floor, end=self.end)


@dataclass(frozen=True)
class ClusterPin:
    geohash: str
    count: int
    lat: float
    lng: float


@dataclass(frozen=True)
class MapPin:
    id: str
    lat: float
    lng: float
