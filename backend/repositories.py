"""Path-addressed JSON tree persisted in SQL.

Every write stores its value as one row keyed by its full path. Reading a path
returns the row at that path, the matching part of an ancestor row, or a dict
assembled from all descendant rows. Each write bumps the revision counter of
the written path, its ancestors and any tracked descendants so pollers can
detect change cheaply.
"""
from __future__ import annotations

import json
import secrets
import time
from datetime import datetime, timezone

from sqlalchemy import bindparam, text as sql_text

from backend.db import get_sessionmaker

NODES_TABLE = "store_nodes"
REVISIONS_TABLE = "store_revisions"

FORBIDDEN_KEY_CHARS = set("/.#$[]")


class InvalidPath(ValueError):
    pass


def split_path(path: str) -> list[str]:
    parts = str(path or "").strip("/").split("/")
    if any(not part for part in parts):
        raise InvalidPath(f"Invalid store path: {path!r}")
    for part in parts:
        if FORBIDDEN_KEY_CHARS & set(part):
            raise InvalidPath(f"Invalid key {part!r}")
    return parts


def normalize_path(path: str) -> str:
    return "/".join(split_path(path))


def _ancestors(parts: list[str]) -> list[str]:
    return ["/".join(parts[:size]) for size in range(1, len(parts))]


def _parent(parts: list[str]) -> str:
    return "/".join(parts[:-1])


def _new_key() -> str:
    millis = int(time.time() * 1000)
    return f"{millis:013x}{secrets.token_hex(5)}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dig(value, parts: list[str]):
    for part in parts:
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _assign(tree: dict, parts: list[str], value) -> None:
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    if value is None:
        node.pop(parts[-1], None)
    else:
        node[parts[-1]] = value


def _prune(value):
    if not isinstance(value, dict):
        return value
    pruned = {}
    for key, child in value.items():
        child = _prune(child)
        if child is None or child == {}:
            continue
        pruned[key] = child
    return pruned or None


def filter_children(value, order_by: str | None, equal_to):
    if order_by is None:
        return value
    if not isinstance(value, dict):
        return None
    matched = {
        key: child
        for key, child in value.items()
        if isinstance(child, dict) and child.get(order_by) == equal_to
    }
    return matched or None


async def _find_ancestor_row(session, parts: list[str]):
    ancestors = _ancestors(parts)
    if not ancestors:
        return None
    rows = (await session.execute(
        sql_text(f"SELECT path, value_json FROM {NODES_TABLE} WHERE path IN :paths").bindparams(
            bindparam("paths", expanding=True)
        ),
        {"paths": ancestors},
    )).mappings().all()
    if not rows:
        return None
    row = max(rows, key=lambda item: len(item["path"]))
    return dict(row)


async def _delete_subtree(session, path: str) -> None:
    prefix = f"{path}/"
    await session.execute(
        sql_text(
            f"""
            DELETE FROM {NODES_TABLE}
            WHERE path = :path OR substr(path, 1, :prefix_len) = :prefix
            """
        ),
        {"path": path, "prefix": prefix, "prefix_len": len(prefix)},
    )


async def _put_row(session, parts: list[str], value) -> None:
    await session.execute(
        sql_text(
            f"""
            INSERT INTO {NODES_TABLE} (path, parent, value_json, updated_at)
            VALUES (:path, :parent, :value_json, :updated_at)
            ON CONFLICT(path) DO UPDATE SET
                parent=EXCLUDED.parent,
                value_json=EXCLUDED.value_json,
                updated_at=EXCLUDED.updated_at
            """
        ),
        {
            "path": "/".join(parts),
            "parent": _parent(parts),
            "value_json": json.dumps(value, ensure_ascii=False),
            "updated_at": _now_iso(),
        },
    )


async def _bump_revisions(session, parts: list[str]) -> None:
    path = "/".join(parts)
    for target in _ancestors(parts) + [path]:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {REVISIONS_TABLE} (path, revision) VALUES (:path, 1)
                ON CONFLICT(path) DO UPDATE SET revision = {REVISIONS_TABLE}.revision + 1
                """
            ),
            {"path": target},
        )
    prefix = f"{path}/"
    await session.execute(
        sql_text(
            f"""
            UPDATE {REVISIONS_TABLE} SET revision = revision + 1
            WHERE substr(path, 1, :prefix_len) = :prefix
            """
        ),
        {"prefix": prefix, "prefix_len": len(prefix)},
    )


async def _apply(session, parts: list[str], value) -> None:
    path = "/".join(parts)
    ancestor = await _find_ancestor_row(session, parts)
    if ancestor is not None:
        ancestor_parts = ancestor["path"].split("/")
        tree = json.loads(ancestor["value_json"])
        if not isinstance(tree, dict):
            tree = {}
        _assign(tree, parts[len(ancestor_parts):], value)
        tree = _prune(tree)
        if tree is None:
            await _delete_subtree(session, ancestor["path"])
        else:
            await _put_row(session, ancestor_parts, tree)
    else:
        await _delete_subtree(session, path)
        if value is not None:
            await _put_row(session, parts, value)
    await _bump_revisions(session, parts)


async def read_node(path: str, order_by: str | None = None, equal_to=None):
    parts = split_path(path)
    path = "/".join(parts)
    prefix = f"{path}/"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT value_json FROM {NODES_TABLE} WHERE path = :path"),
            {"path": path},
        )).fetchone()
        if row is not None:
            return filter_children(json.loads(row[0]), order_by, equal_to)
        ancestor = await _find_ancestor_row(session, parts)
        if ancestor is not None:
            ancestor_parts = ancestor["path"].split("/")
            value = _dig(json.loads(ancestor["value_json"]), parts[len(ancestor_parts):])
            return filter_children(value, order_by, equal_to)
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT path, value_json FROM {NODES_TABLE}
                WHERE substr(path, 1, :prefix_len) = :prefix
                ORDER BY path
                """
            ),
            {"prefix": prefix, "prefix_len": len(prefix)},
        )).mappings().all()
    if not rows:
        return None
    tree: dict = {}
    for item in rows:
        relative = item["path"][len(prefix):].split("/")
        _assign(tree, relative, json.loads(item["value_json"]))
    return filter_children(tree, order_by, equal_to)


async def write_node(path: str, value) -> None:
    parts = split_path(path)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await _apply(session, parts, value)
        await session.commit()


async def push_node(path: str, value) -> str:
    parts = split_path(path)
    key = _new_key()
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await _apply(session, parts + [key], value)
        await session.commit()
    return key


async def delete_node(path: str) -> None:
    await write_node(path, None)


async def get_revision(path: str) -> int:
    path = normalize_path(path)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT revision FROM {REVISIONS_TABLE} WHERE path = :path"),
            {"path": path},
        )).fetchone()
        if row is None:
            await session.execute(
                sql_text(
                    f"INSERT INTO {REVISIONS_TABLE} (path, revision) VALUES (:path, 0) "
                    "ON CONFLICT(path) DO NOTHING"
                ),
                {"path": path},
            )
            await session.commit()
            return 0
    return int(row[0] or 0)
