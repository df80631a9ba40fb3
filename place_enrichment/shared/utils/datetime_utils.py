"""
Utilidades puras de fecha/hora usadas por el pipeline.
"""
from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza datetime a UTC (aware).

    Algunos drivers (SQLite) devuelven datetimes naive; se asumen UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
