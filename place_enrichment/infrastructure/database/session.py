"""
Gestión de engine y sesiones de base de datos.

Cada escritura del pipeline abre su propia sesión corta desde la
session factory: no hay una transacción global por corrida.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base

from place_enrichment.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(database_url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    if "postgresql" in database_url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Crea el engine async para la URL indicada (default: settings)."""
    url = database_url or settings.effective_database_url
    return create_async_engine(url, **_create_engine_args(url))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory usada por los repositorios."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def init_db(engine: AsyncEngine) -> None:
    """Crea todas las tablas (dev/tests; en producción usar alembic)."""
    from place_enrichment.infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
