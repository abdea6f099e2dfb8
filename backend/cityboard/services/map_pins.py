from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Protocol

from cityboard.domain.clustering import cluster_events, map_pins
from cityboard.domain.models import ClusterPin, DateRange, MapPin, Viewport
from cityboard.domain.zoom import precision_for_zoom


class SpatialEventQuery(Protocol):
    """Contract for the event store behind the map endpoints."""

    def query(
        self,
        viewport: Viewport,
        *,
        category_ids: Optional[Iterable[str]] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        """Return ``{id, lat, lng}`` rows for ACTIVE events inside ``viewport``.

        Rows never carry null coordinates. ``category_ids`` matches events that
        belong to any of the given categories; an empty or missing value means
        no category filter. The same event may be returned more than once.
        """
        raise NotImplementedError


class GeoClusterService:
    def __init__(self, events_query: SpatialEventQuery):
        if events_query is None:
            raise ValueError("events_query is required")
        self.events_query = events_query

    def get_clusters(
        self,
        viewport: Viewport,
        zoom: int,
        category_ids: Iterable[str] = (),
        date_range: Optional[DateRange] = None,
    ) -> List[ClusterPin]:
        precision = precision_for_zoom(zoom)
        rows = self.events_query.query(viewport, category_ids=list(category_ids), date_range=date_range)
        return cluster_events(rows, precision)


class PinRetrievalService:
    def __init__(self, events_query: SpatialEventQuery):
        if events_query is None:
            raise ValueError("events_query is required")
        self.events_query = events_query

    def get_pins(
        self,
        viewport: Viewport,
        category_ids: Iterable[str] = (),
        date_range: Optional[DateRange] = None,
    ) -> List[MapPin]:
        rows = self.events_query.query(viewport, category_ids=list(category_ids), date_range=date_range)
        return map_pins(rows)
