# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from authgate.shared.config import DatabaseConfig, load_config
from authgate.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def create_db_engine(config: DatabaseConfig) -> Engine:
    options: dict[str, object] = {"echo": False, "pool_pre_ping": True}
    if _is_sqlite(config.url):
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(config.pool_timeout),
        }
    else:
        options.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
        )
    engine = create_engine(config.url, **options)

    if _is_sqlite(config.url):

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
                cur.execute("PRAGMA foreign_keys=ON;")
                cur.execute(f"PRAGMA busy_timeout={int(config.pool_timeout * 1000)};")
            finally:
                cur.close()

    return engine


ENGINE: Engine = create_db_engine(_config.database)

SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


@contextmanager
def session_scope(factory: Callable[[], Session] | None = None) -> Iterator[Session]:
    session = (factory or SessionLocal)()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except Exception:
        logger.debug("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        if factory is None:
            SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db(engine: Engine | None = None) -> None:
    from . import models  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(bind=engine or ENGINE)
    logger.info("Database schema ensured")
