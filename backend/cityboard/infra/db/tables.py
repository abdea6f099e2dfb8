from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, MetaData, Table, Text

metadata = MetaData()

categories_table = Table(
    "categories",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

events_table = Table(
    "events",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("location", Text),
    Column("date_time", DateTime(timezone=True), nullable=False),
    Column("lat", Float),
    Column("lng", Float),
    Column("status", Text, nullable=False, default="ACTIVE"),
    Column("capacity", Integer),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_events_status_date_time", "status", "date_time"),
)

event_categories_table = Table(
    "event_categories",
    metadata,
    Column("event_id", Text, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Text, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)
