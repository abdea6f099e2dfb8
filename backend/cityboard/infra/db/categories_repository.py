from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from .tables import categories_table


class CategoriesRepository:
    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def upsert_category(self, name: str, category_id: Optional[str] = None) -> str:
        name = name.strip()
        if not name:
            raise ValueError("category name is required")
        now = datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            existing = conn.execute(
                select(categories_table.c.id).where(categories_table.c.name == name)
            ).scalar_one_or_none()
            if existing:
                conn.execute(
                    update(categories_table).where(categories_table.c.id == existing).values(updated_at=now)
                )
                return existing
            category_id = category_id or f"cat_{uuid4().hex}"
            conn.execute(
                insert(categories_table).values(id=category_id, name=name, created_at=now, updated_at=now)
            )
            return category_id

    def list_categories(self) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(categories_table.c.id, categories_table.c.name).order_by(categories_table.c.name)
            ).mappings().all()
        return [dict(row) for row in rows]

    def get_ids_by_name(self, names: Iterable[str]) -> Dict[str, str]:
        wanted = [name.strip() for name in names if name and name.strip()]
        if not wanted:
            return {}
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(categories_table.c.id, categories_table.c.name).where(categories_table.c.name.in_(wanted))
            ).mappings().all()
        return {row["name"]: row["id"] for row in rows}
