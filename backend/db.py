from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from backend.settings import get_settings

logger = logging.getLogger(__name__)

# Scheme rewrites to the async drivers the store runs on.
_SCHEME_ALIASES = (
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("postgresql+psycopg2://", "postgresql+asyncpg://"),
    ("sqlite:///", "sqlite+aiosqlite:///"),
)
_DROPPED_PG_PARAMS = {"channel_binding", "ssl", "sslmode"}
_LOCAL_HOSTS = {"", "localhost", "127.0.0.1"}


def _asyncpg_query(query: str) -> str:
    params = parse_qsl(query, keep_blank_values=True)
    kept = [(key, value) for key, value in params if key not in _DROPPED_PG_PARAMS]
    if any(key == "sslmode" for key, _ in params):
        kept.append(("ssl", "true"))
    return urlencode(kept)


def normalize_database_url(database_url: str) -> str:
    """Point DATABASE_URL at an async driver; hosted postgres URLs get asyncpg-style ssl."""
    url = str(database_url or "").strip()
    for prefix, replacement in _SCHEME_ALIASES:
        if url.startswith(prefix):
            url = replacement + url[len(prefix):]
            break
    if not url.startswith("postgresql+asyncpg://"):
        return url
    try:
        parsed = urlparse(url)
    except ValueError:
        logger.debug("Could not parse database URL query")
        return url
    return urlunparse(parsed._replace(query=_asyncpg_query(parsed.query)))


def is_sqlite_url(database_url: str) -> bool:
    return str(database_url).strip().lower().startswith("sqlite")


def _engine_options(db_url: str) -> dict:
    if is_sqlite_url(db_url):
        return {"future": True}
    options = {"pool_pre_ping": True, "future": True, "pool_size": 10, "max_overflow": 5}
    try:
        host = urlparse(db_url).hostname or ""
    except ValueError:
        host = ""
    if host not in _LOCAL_HOSTS:
        options["connect_args"] = {"ssl": True}
    return options


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = normalize_database_url(get_settings().database_url)
        _engine = create_async_engine(db_url, **_engine_options(db_url))
        logger.info("Store database engine created (%s)", urlparse(db_url).scheme)
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
