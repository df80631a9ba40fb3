"""
INSERT con soporte ON CONFLICT según el dialecto del engine.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, table):
    """
    Retorna el constructor `insert()` del dialecto de la sesión
    (PostgreSQL o SQLite), ambos con on_conflict_do_nothing/do_update.
    """
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(table)
    if dialect_name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Dialecto sin soporte de ON CONFLICT: {dialect_name}")
