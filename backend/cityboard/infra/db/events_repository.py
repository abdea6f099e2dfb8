from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Engine

from cityboard.domain.models import DateRange, EventStatus, Viewport

from .tables import event_categories_table, events_table


EVENT_COLUMNS = [
    "title",
    "description",
    "location",
    "date_time",
    "lat",
    "lng",
    "status",
    "capacity",
]


class EventsRepository:
    """Event store access, including the viewport query behind the map endpoints."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def upsert_event(self, event_data: Dict[str, Any]) -> str:
        resolved = {col: event_data.get(col) for col in EVENT_COLUMNS}
        status = resolved.get("status") or EventStatus.ACTIVE
        resolved["status"] = EventStatus(status).value
        resolved["date_time"] = _to_utc_naive(resolved["date_time"])
        category_ids = event_data.get("category_ids")
        now = datetime.now(timezone.utc)
        event_id = event_data.get("id")
        with self.engine.begin() as conn:
            existing = None
            if event_id:
                existing = conn.execute(
                    select(events_table.c.id).where(events_table.c.id == event_id)
                ).scalar_one_or_none()
            if existing:
                conn.execute(
                    update(events_table)
                    .where(events_table.c.id == existing)
                    .values(**resolved, updated_at=now)
                )
            else:
                event_id = event_id or new_event_id()
                conn.execute(
                    insert(events_table).values(id=event_id, **resolved, created_at=now, updated_at=now)
                )
            if category_ids is not None:
                self._replace_categories(conn, event_id, category_ids)
        return event_id

    def set_status(self, event_id: str, status: EventStatus | str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(
                update(events_table)
                .where(events_table.c.id == event_id)
                .values(status=EventStatus(status).value, updated_at=datetime.now(timezone.utc))
            )
        return result.rowcount > 0

    def get_event(self, event_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(select(events_table).where(events_table.c.id == event_id)).mappings().first()
            if row is None:
                return None
            category_ids = conn.execute(
                select(event_categories_table.c.category_id)
                .where(event_categories_table.c.event_id == event_id)
                .order_by(event_categories_table.c.category_id)
            ).scalars().all()
        event = dict(row)
        event["category_ids"] = list(category_ids)
        return event

    def query(
        self,
        viewport: Viewport,
        *,
        category_ids: Optional[Iterable[str]] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        """ACTIVE events with coordinates inside ``viewport``.

        ``category_ids`` is an any-of filter. The association join yields one
        row per matching category, so callers must collapse rows by id.
        """
        stmt = select(events_table.c.id, events_table.c.lat, events_table.c.lng)
        filters = [
            events_table.c.status == EventStatus.ACTIVE.value,
            events_table.c.lat.is_not(None),
            events_table.c.lng.is_not(None),
            events_table.c.lat.between(viewport.min_lat, viewport.max_lat),
            events_table.c.lng.between(viewport.min_lng, viewport.max_lng),
        ]
        wanted = sorted(set(category_ids or []))
        if wanted:
            stmt = stmt.select_from(
                events_table.join(
                    event_categories_table,
                    event_categories_table.c.event_id == events_table.c.id,
                )
            )
            filters.append(event_categories_table.c.category_id.in_(wanted))
        if date_range is not None:
            if date_range.start is not None:
                filters.append(events_table.c.date_time >= _to_utc_naive(date_range.start))
            if date_range.end is not None:
                filters.append(events_table.c.date_time <= _to_utc_naive(date_range.end))
        with self.engine.begin() as conn:
            rows = conn.execute(stmt.where(*filters)).mappings().all()
        return [dict(row) for row in rows]

    @staticmethod
    def _replace_categories(conn: Connection, event_id: str, category_ids: Iterable[str]) -> None:
        conn.execute(delete(event_categories_table).where(event_categories_table.c.event_id == event_id))
        unique_ids = list(dict.fromkeys(category_ids))
        if unique_ids:
            conn.execute(
                insert(event_categories_table),
                [{"event_id": event_id, "category_id": category_id} for category_id in unique_ids],
            )


def new_event_id() -> str:
    return f"evt_{uuid4().hex}"


def _to_utc_naive(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
