"""Fixtures compartidas: base de datos de pruebas y coordinador de inscripciones.

Por defecto se usa un SQLite temporal (aiosqlite). Con TEST_DATABASE_URL se
puede apuntar a un PostgreSQL real (postgresql+asyncpg://...), donde además
se ejercita el SELECT ... FOR UPDATE.
"""
import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.database import Base, crear_engine, crear_session_factory
from app.models import *  # noqa: F401, F403 - Registra modelos en Base.metadata
from app.services.inscripcion_service import CoordinadorInscripciones


@pytest.fixture
def db_url(tmp_path) -> str:
    return os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'escape_room_test.db'}",
    )


@pytest_asyncio.fixture
async def engine(db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Motor async con el esquema recién creado."""
    engine = crear_engine(db_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return crear_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sesión para preparar datos y consultar resultados en las pruebas."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def coordinador(session_factory) -> CoordinadorInscripciones:
    return CoordinadorInscripciones(session_factory, timeout_segundos=5.0)
