"""SQLite/SQLModel plumbing for the key-value table."""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Callable, ContextManager, Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..models.settings import AppSetting

SessionFactory = Callable[[], ContextManager[Session]]


def create_db_engine(config: BaseConfig) -> Engine:
    return create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())


def init_database(engine: Engine) -> None:
    """Create the ``app_setting`` table when missing; nothing else lives here."""
    SQLModel.metadata.create_all(engine, tables=[AppSetting.__table__])


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Open a session for one repository call; writers commit explicitly."""
    with Session(engine) as session:
        yield session


def create_session_factory(engine: Engine) -> SessionFactory:
    return partial(session_scope, engine)


def bootstrap_database(config: BaseConfig) -> SessionFactory:
    """Engine with the schema in place, wrapped as a session factory."""
    engine = create_db_engine(config)
    init_database(engine)
    return create_session_factory(engine)
