from __future__ import annotations

from pathlib import Path

import pytest

from daybook.config import Settings
from daybook.infra.db import create_session_factory, init_db
from daybook.infra.repository import SqlEntityStore
from daybook.infra.store import MemoryEntityStore
from daybook.services.container import Container, build_container


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def store() -> MemoryEntityStore:
    return MemoryEntityStore()


@pytest.fixture()
def sql_store(tmp_path: Path) -> SqlEntityStore:
    engine, session_factory = create_session_factory(f"sqlite:///{tmp_path / 'daybook.sqlite3'}")
    init_db(engine)
    yield SqlEntityStore(session_factory)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    """Every store backend; tests using it run once per backend."""
    if request.param == "memory":
        return MemoryEntityStore()
    return request.getfixturevalue("sql_store")


@pytest.fixture()
def container(settings: Settings, any_store) -> Container:
    return build_container(settings, store=any_store)


@pytest.fixture()
def memory_container(settings: Settings, store: MemoryEntityStore) -> Container:
    return build_container(settings, store=store)
