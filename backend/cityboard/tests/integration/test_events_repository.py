from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, func, select

from cityboard.domain.models import DateRange, EventStatus, Viewport
from cityboard.infra.db.categories_repository import CategoriesRepository
from cityboard.infra.db.events_repository import EventsRepository
from cityboard.infra.db.tables import event_categories_table, metadata

WORLD = Viewport(min_lat=-90, max_lat=90, min_lng=-180, max_lng=180)
MADRID = Viewport(min_lat=40.3, max_lat=40.5, min_lng=-3.8, max_lng=-3.6)


@pytest.fixture()
def sqlite_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'events_repo.db'}", future=True)
    metadata.create_all(engine)
    yield engine
    metadata.drop_all(engine)


@pytest.fixture()
def repo(sqlite_engine):
    return EventsRepository(sqlite_engine)


@pytest.fixture()
def categories(sqlite_engine):
    repo = CategoriesRepository(sqlite_engine)
    return {name: repo.upsert_category(name, category_id=name) for name in ["A", "B", "C", "D"]}


def make_event(event_id, lat=40.4168, lng=-3.7038, **extra):
    payload = {
        "id": event_id,
        "title": f"Event {event_id}",
        "date_time": datetime(2030, 3, 1, 20, 0, tzinfo=timezone.utc),
        "lat": lat,
        "lng": lng,
    }
    payload.update(extra)
    return payload


def ids(rows):
    return sorted({row["id"] for row in rows})


def test_requires_engine():
    with pytest.raises(ValueError):
        EventsRepository(None)


def test_upsert_inserts_then_updates(repo, categories):
    event_id = repo.upsert_event(make_event(None, category_ids=["A"]))
    assert event_id.startswith("evt_")
    repo.upsert_event(make_event(event_id, title="Renamed", category_ids=["B", "C"]))
    stored = repo.get_event(event_id)
    assert stored["title"] == "Renamed"
    assert stored["status"] == "ACTIVE"
    assert stored["category_ids"] == ["B", "C"]


def test_query_filters_by_viewport(repo):
    repo.upsert_event(make_event("inside"))
    repo.upsert_event(make_event("outside", lat=52.52, lng=13.405))
    assert ids(repo.query(MADRID)) == ["inside"]


def test_query_skips_canceled_and_unlocated_events(repo):
    repo.upsert_event(make_event("active"))
    repo.upsert_event(make_event("canceled", status="CANCELED"))
    repo.upsert_event(make_event("no-coords", lat=None, lng=None))
    repo.upsert_event(make_event("later-canceled"))
    assert repo.set_status("later-canceled", EventStatus.CANCELED)
    rows = repo.query(WORLD)
    assert ids(rows) == ["active"]
    assert all(row["lat"] is not None and row["lng"] is not None for row in rows)


def test_category_filter_matches_any_of(repo, categories):
    repo.upsert_event(make_event("tagged", category_ids=["A", "B"]))
    assert ids(repo.query(WORLD, category_ids=["B", "C"])) == ["tagged"]
    assert repo.query(WORLD, category_ids=["C", "D"]) == []
    assert ids(repo.query(WORLD, category_ids=[])) == ["tagged"]


def test_category_join_can_repeat_events(repo, categories, sqlite_engine):
    repo.upsert_event(make_event("multi", category_ids=["A", "B", "C"]))
    with sqlite_engine.begin() as conn:
        links = conn.execute(select(func.count()).select_from(event_categories_table)).scalar_one()
    assert links == 3
    rows = repo.query(WORLD, category_ids=["A", "B", "C"])
    assert len(rows) == 3
    assert ids(rows) == ["multi"]


def test_date_bounds_are_inclusive(repo):
    when = datetime(2030, 5, 10, 18, 0)
    repo.upsert_event(make_event("dated", date_time=when))
    assert ids(repo.query(WORLD, date_range=DateRange(start=when, end=when))) == ["dated"]
    assert repo.query(WORLD, date_range=DateRange(start=datetime(2030, 5, 10, 18, 1))) == []
    assert repo.query(WORLD, date_range=DateRange(end=datetime(2030, 5, 10, 17, 59))) == []


def test_aware_bounds_are_compared_in_utc(repo):
    repo.upsert_event(make_event("dated", date_time=datetime(2030, 5, 10, 18, 0, tzinfo=timezone.utc)))
    bound = datetime.fromisoformat("2030-05-10T20:00:00+02:00")
    assert ids(repo.query(WORLD, date_range=DateRange(start=bound, end=bound))) == ["dated"]


def test_set_status_unknown_event_returns_false(repo):
    assert repo.set_status("missing", "CANCELED") is False


def test_categories_listing_and_lookup(sqlite_engine, categories):
    repo = CategoriesRepository(sqlite_engine)
    assert repo.upsert_category("A") == "A"
    assert [row["name"] for row in repo.list_categories()] == ["A", "B", "C", "D"]
    assert repo.get_ids_by_name(["B", " D ", "missing", ""]) == {"B": "B", "D": "D"}
    with pytest.raises(ValueError):
        repo.upsert_category("  ")
