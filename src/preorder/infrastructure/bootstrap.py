"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from preorder.infrastructure.config import Settings, load_settings
from preorder.infrastructure.persistence.database import make_engine, make_session_factory
from preorder.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@lru_cache(maxsize=1)
def settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def engine() -> Engine:
    return make_engine(settings().database_url)


@lru_cache(maxsize=1)
def session_factory() -> sessionmaker:
    return make_session_factory(engine())


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())


def reset() -> None:
    """Forget cached settings and connections (used after env changes)."""
    if engine.cache_info().currsize:
        engine().dispose()
    session_factory.cache_clear()
    engine.cache_clear()
    settings.cache_clear()
