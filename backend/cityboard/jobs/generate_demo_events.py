from __future__ import annotations

import os
from datetime import date, datetime, time, timedelta
from typing import Dict, Optional
from zoneinfo import ZoneInfo

import typer
from sqlalchemy import create_engine

from cityboard.infra.db.categories_repository import CategoriesRepository
from cityboard.infra.db.events_repository import EventsRepository
from cityboard.infra.db.tables import metadata

app = typer.Typer(help="Seed demo events around a city center so the map has data without real users")
DEFAULT_TZ = os.getenv("DEMO_EVENTS_TZ", "Europe/Berlin")
BASE_HOURS = [10, 12, 18, 20, 22]
CATEGORIES = ["Music", "Sports", "Art", "Food", "Community"]
# offsets in degrees, roughly 200 m to 5 km from the center so several zoom levels show distinct clusters
RING_OFFSETS = [0.002, 0.01, 0.02, 0.045]


def generate_demo_events(
    *,
    city: str,
    lat: float,
    lng: float,
    days: int = 7,
    per_day: int = 10,
    canceled_every: int = 0,
    timezone_name: str = DEFAULT_TZ,
    engine=None,
    database_url: Optional[str] = None,
    reference_date: Optional[date] = None,
) -> Dict[str, int]:
    if days <= 0:
        raise ValueError("days must be > 0")
    if per_day <= 0:
        raise ValueError("per_day must be > 0")
    if engine is None:
        if database_url is None:
            database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL required if engine not provided")
        engine = create_engine(database_url, future=True)

    metadata.create_all(engine)
    categories_repo = CategoriesRepository(engine)
    events_repo = EventsRepository(engine)
    category_ids = [categories_repo.upsert_category(name) for name in CATEGORIES]

    tz = ZoneInfo(timezone_name)
    today = reference_date or datetime.now(tz).date()
    slug = city.lower().replace(" ", "-")

    inserted = 0
    updated = 0
    canceled = 0
    for offset in range(days):
        day = today + timedelta(days=offset)
        for idx in range(per_day):
            hour = BASE_HOURS[idx % len(BASE_HOURS)]
            minute = (idx * 7) % 60
            start_local = datetime.combine(day, time(hour=hour, minute=minute), tzinfo=tz)
            ring = RING_OFFSETS[idx % len(RING_OFFSETS)]
            # alternate quadrants around the center
            lat_sign = 1 if (idx // 2) % 2 == 0 else -1
            lng_sign = 1 if idx % 2 == 0 else -1
            primary = category_ids[idx % len(category_ids)]
            secondary = category_ids[(idx + offset) % len(category_ids)]
            event_id = f"evt_demo_{slug}_{day.strftime('%Y%m%d')}_{idx}"
            status = "ACTIVE"
            if canceled_every and (offset * per_day + idx + 1) % canceled_every == 0:
                status = "CANCELED"
                canceled += 1
            payload = {
                "id": event_id,
                "title": f"Demo Event {city} #{offset * per_day + idx + 1}",
                "description": "Generated demo event",
                "location": city,
                "date_time": start_local,
                "lat": lat + lat_sign * ring + (offset * per_day + idx) * 0.0003,
                "lng": lng + lng_sign * ring + (offset * per_day + idx) * 0.0003,
                "status": status,
                "capacity": 50 + idx * 10,
                "category_ids": [primary, secondary],
            }
            existed = events_repo.get_event(event_id)
            events_repo.upsert_event(payload)
            if existed:
                updated += 1
            else:
                inserted += 1
    total_expected = days * per_day
    print(
        f"[generate_demo_events] city={city} days={days} per_day={per_day} "
        f"inserted={inserted} updated={updated} canceled={canceled} expected={total_expected}"
    )
    return {"inserted": inserted, "updated": updated, "canceled": canceled, "expected": total_expected}


@app.command()
def cli(
    city: str = typer.Option(..., help="City name"),
    lat: float = typer.Option(..., help="Center latitude"),
    lng: float = typer.Option(..., help="Center longitude"),
    days: int = typer.Option(7, help="Days ahead to fill, starting today"),
    per_day: int = typer.Option(10, help="Events per day"),
    canceled_every: int = typer.Option(0, help="Mark every Nth event as CANCELED (0 disables)"),
    timezone_name: str = typer.Option(DEFAULT_TZ, help="Timezone of the event times"),
):
    generate_demo_events(
        city=city,
        lat=lat,
        lng=lng,
        days=days,
        per_day=per_day,
        canceled_every=canceled_every,
        timezone_name=timezone_name,
    )


if __name__ == "__main__":
    app()
