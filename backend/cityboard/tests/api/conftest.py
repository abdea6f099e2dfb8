from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from cityboard.api.deps import get_engine
from cityboard.api.main import create_app
from cityboard.config import Settings
from cityboard.infra.db.categories_repository import CategoriesRepository
from cityboard.infra.db.events_repository import EventsRepository
from cityboard.infra.db.tables import metadata


def make_settings(*, hide_past_events: bool = True) -> Settings:
    return Settings(
        database_url=None,
        frontend_origins=("http://localhost:5173",),
        hide_past_events=hide_past_events,
        import_data_dir=Path("/data"),
    )


@pytest.fixture()
def api_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'api_tests.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    metadata.create_all(engine)
    yield engine
    metadata.drop_all(engine)


def _build_api_client(engine, *, hide_past_events: bool):
    app = create_app(engine=engine, settings=make_settings(hide_past_events=hide_past_events))
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def api_client(api_engine):
    yield from _build_api_client(api_engine, hide_past_events=True)


@pytest.fixture()
def api_client_all_dates(api_engine):
    yield from _build_api_client(api_engine, hide_past_events=False)


@pytest.fixture()
def seed_event(api_engine):
    """Insert an event; category names double as their ids."""
    events_repo = EventsRepository(api_engine)
    categories_repo = CategoriesRepository(api_engine)
    upcoming = datetime.now(timezone.utc) + timedelta(days=3)

    def _seed(event_id, lat, lng, *, categories=(), status="ACTIVE", when=None):
        category_ids = [categories_repo.upsert_category(name, category_id=name) for name in categories]
        return events_repo.upsert_event(
            {
                "id": event_id,
                "title": f"Event {event_id}",
                "date_time": when or upcoming,
                "lat": lat,
                "lng": lng,
                "status": status,
                "category_ids": category_ids,
            }
        )

    return _seed
