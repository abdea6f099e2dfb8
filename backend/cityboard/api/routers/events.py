from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from cityboard.api.deps import category_ids_param, date_range_params, get_engine, viewport_params
from cityboard.domain.models import DateRange, Viewport
from cityboard.domain.zoom import precision_for_zoom
from cityboard.infra.db.categories_repository import CategoriesRepository
from cityboard.infra.db.events_repository import EventsRepository
from cityboard.services.map_pins import GeoClusterService, PinRetrievalService

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["events"])


@router.get("/events/clusters")
def list_event_clusters(
    zoom: int = Query(..., ge=0, le=30),
    viewport: Viewport = Depends(viewport_params),
    category_ids: List[str] = Depends(category_ids_param),
    date_range: DateRange = Depends(date_range_params),
    engine: Engine = Depends(get_engine),
):
    service = GeoClusterService(EventsRepository(engine))
    clusters = service.get_clusters(viewport, zoom, category_ids, date_range)
    logger.info(
        "Clustered %d events into %d cells (zoom=%d precision=%d categories=%d)",
        sum(cluster.count for cluster in clusters),
        len(clusters),
        zoom,
        precision_for_zoom(zoom),
        len(category_ids),
    )
    return [
        {
            "geohash": cluster.geohash,
            "count": cluster.count,
            "lat": cluster.lat,
            "lng": cluster.lng,
        }
        for cluster in clusters
    ]


@router.get("/events/pins")
def list_event_pins(
    viewport: Viewport = Depends(viewport_params),
    category_ids: List[str] = Depends(category_ids_param),
    date_range: DateRange = Depends(date_range_params),
    engine: Engine = Depends(get_engine),
):
    service = PinRetrievalService(EventsRepository(engine))
    pins = service.get_pins(viewport, category_ids, date_range)
    logger.info("Returning %d map pins (categories=%d)", len(pins), len(category_ids))
    return [{"id": pin.id, "lat": pin.lat, "lng": pin.lng} for pin in pins]


@router.get("/categories")
def list_categories(engine: Engine = Depends(get_engine)):
    """
    Categories available to the map filter panel.
    """
    return CategoriesRepository(engine).list_categories()
