"""Motor y sesiones asíncronas con SQLAlchemy 2.0.

En producción PostgreSQL (asyncpg). Con SQLite (aiosqlite, pruebas y demos)
las claves foráneas se activan en cada conexión para que los ON DELETE CASCADE
de turnos, equipos y membresías se cumplan igual.
"""
import logging

from sqlalchemy import BigInteger, Integer, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

logger = logging.getLogger(__name__)

# BIGINT en PostgreSQL; INTEGER en SQLite para que la PK sea alias de ROWID
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


def crear_engine(url: str, **kwargs) -> AsyncEngine:
    """Crea el motor async para la URL dada."""
    engine = create_async_engine(url, echo=settings.debug, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _activar_foreign_keys(dbapi_connection, _):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def crear_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Fábrica de sesiones; el coordinador de inscripciones abre una por operación."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


if settings.database_url_async.startswith("sqlite"):
    engine = crear_engine(settings.database_url_async)
else:
    engine = crear_engine(
        settings.database_url_async,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )

AsyncSessionLocal = crear_session_factory(engine)


class Base(DeclarativeBase):
    """Base para todos los modelos SQLAlchemy."""

    pass


async def get_db():
    """Dependencia para obtener una sesión de base de datos por request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Crea las tablas que falten (escape_rooms, turnos, equipos, miembros_equipo, estudiantes)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Esquema verificado en %s", engine.url.render_as_string(hide_password=True))
