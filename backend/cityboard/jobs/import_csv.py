from __future__ import annotations

import csv
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy import create_engine

from cityboard.config import load_settings
from cityboard.infra.db.categories_repository import CategoriesRepository
from cityboard.infra.db.events_repository import EventsRepository
from cityboard.infra.db.tables import metadata

CATEGORY_SEPARATOR = "|"


def import_events_from_csv(
    data_dir: str | Path | None = None,
    *,
    engine=None,
    database_url: Optional[str] = None,
) -> Dict[str, int]:
    base_path = _resolve_data_dir(data_dir)
    categories_path = base_path / "categories_seed.csv"
    events_path = base_path / "events_seed.csv"

    if engine is None:
        if database_url is None:
            database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL required if engine not provided")
        engine = create_engine(database_url, future=True)
    metadata.create_all(engine)
    categories_repo = CategoriesRepository(engine)
    events_repo = EventsRepository(engine)

    categories_count = 0
    if categories_path.exists():
        categories_count = _import_categories(categories_path, categories_repo)
    events_count, skipped = _import_events(events_path, events_repo, categories_repo)
    db_url = getattr(engine, "url", database_url or os.getenv("DATABASE_URL"))
    print(
        f"[import_csv] Import complete database={db_url} "
        f"categories={categories_count} events={events_count} skipped={skipped}"
    )
    return {"categories": categories_count, "events": events_count, "skipped": skipped}


def _resolve_data_dir(data_dir: str | Path | None) -> Path:
    if data_dir is None:
        candidate = load_settings().import_data_dir
    else:
        candidate = Path(data_dir)
    if not candidate.is_absolute():
        candidate = (Path.cwd() / candidate).resolve()
    if not candidate.exists():
        raise FileNotFoundError(f"Data directory not found: {candidate}")
    return candidate


def _import_categories(path: Path, repo: CategoriesRepository) -> int:
    count = 0
    for row in _read_csv(path):
        repo.upsert_category(row["name"], category_id=row.get("id") or None)
        count += 1
    return count


def _import_events(path: Path, repo: EventsRepository, categories_repo: CategoriesRepository) -> tuple[int, int]:
    count = 0
    skipped = 0
    for row in _read_csv(path):
        event_id = row.get("id") or None
        try:
            date_time = _parse_dt(row["date_time"])
        except (ValueError, TypeError) as exc:
            print(
                f"[import_csv] WARNING: skipping event {event_id or row.get('title')} due to invalid datetime: {exc}"
            )
            skipped += 1
            continue
        names = [name.strip() for name in (row.get("categories") or "").split(CATEGORY_SEPARATOR) if name.strip()]
        category_ids = [categories_repo.upsert_category(name) for name in names]
        payload = {
            "id": event_id,
            "title": row["title"],
            "description": row.get("description") or None,
            "location": row.get("location") or None,
            "date_time": date_time,
            "lat": _parse_optional_float(row.get("lat")),
            "lng": _parse_optional_float(row.get("lng")),
            "status": (row.get("status") or "ACTIVE").upper(),
            "capacity": int(row["capacity"]) if row.get("capacity") else None,
            "category_ids": category_ids,
        }
        repo.upsert_event(payload)
        count += 1
    return count, skipped


def _read_csv(path: Path):
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            yield {k: (v.strip() if isinstance(v, str) else v) for k, v in row.items()}


def _parse_optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _parse_dt(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

if __name__ == "__main__":
    import sys
    data_arg = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    import_events_from_csv(data_arg)
