from __future__ import annotations

from sqlalchemy import text as sql_text

from backend.db import get_engine


NODES_TABLE = "store_nodes"
REVISIONS_TABLE = "store_revisions"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {NODES_TABLE} (
                    path TEXT PRIMARY KEY,
                    parent TEXT NOT NULL,
                    value_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {REVISIONS_TABLE} (
                    path TEXT PRIMARY KEY,
                    revision INTEGER NOT NULL DEFAULT 0
                )
                """
            )
        )
        await conn.execute(
            sql_text(f"CREATE INDEX IF NOT EXISTS idx_{NODES_TABLE}_parent ON {NODES_TABLE} (parent)")
        )
