from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import List, Optional

from fastapi import HTTPException, Query, Request
from sqlalchemy.engine import Engine

from cityboard.config import Settings, load_settings
from cityboard.domain.models import DateRange, InvalidDateRangeError, InvalidViewportError, Viewport


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "db_engine", None)
    if engine is None:
        raise HTTPException(status_code=500, detail="Database engine not configured")
    return engine


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else load_settings()


def viewport_params(
    min_lat: float = Query(..., alias="minLat", ge=-90, le=90),
    max_lat: float = Query(..., alias="maxLat", ge=-90, le=90),
    min_lng: float = Query(..., alias="minLng", ge=-180, le=180),
    max_lng: float = Query(..., alias="maxLng", ge=-180, le=180),
) -> Viewport:
    try:
        return Viewport(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)
    except InvalidViewportError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def category_ids_param(
    category_ids: Optional[List[str]] = Query(None, alias="categoryIds"),
) -> List[str]:
    """Accept ``categoryIds=a,b`` as well as repeated ``categoryIds`` params."""
    if not category_ids:
        return []
    flattened = [part.strip() for value in category_ids for part in value.split(",")]
    return list(dict.fromkeys(part for part in flattened if part))


def date_range_params(
    request: Request,
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
) -> DateRange:
    start = _parse_date_bound("fromDate", from_date, end_of_day=False)
    end = _parse_date_bound("toDate", to_date, end_of_day=True)
    try:
        date_range = DateRange.from_bounds(start, end)
    except InvalidDateRangeError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if get_settings(request).hide_past_events:
        date_range = date_range.not_before(start_of_today())
    return date_range


def start_of_today(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return datetime.combine(now.astimezone(timezone.utc).date(), time.min)


def _parse_date_bound(name: str, value: Optional[str], *, end_of_day: bool) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    raw = value.strip()
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"{name}: invalid ISO-8601 date '{raw}'") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
