from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

import logging


Base = declarative_base()


logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine; in-memory SQLite shares one connection."""
    kwargs: dict = {"echo": echo}
    if _is_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    elif not url.startswith("sqlite"):
        kwargs["pool_pre_ping"] = True
    logger.debug("Creating database engine for %s", url.split("@")[-1])
    return create_async_engine(url, **kwargs)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
    )
