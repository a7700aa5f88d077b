"""
Gestión de sesiones y engine de base de datos.
"""
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine
)
from sqlalchemy.orm import declarative_base

from zoho_sync.core.config import settings


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
    
    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in database_url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT_S,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })
    
    return args


def build_engine(database_url: str) -> AsyncEngine:
    """Crea un engine async con los argumentos de pool adecuados para la URL."""
    return create_async_engine(database_url, **_create_engine_args(database_url))


# Engine de base de datos
engine = build_engine(settings.effective_database_url)


def get_engine() -> AsyncEngine:
    """Dependencia FastAPI: engine compartido (el pool es el recurso compartido)."""
    return engine


async def init_db() -> None:
    """Inicializa la base de datos creando todas las tablas."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
