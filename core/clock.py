from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Fecha y hora actual en UTC, siempre con zona horaria."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Las fechas sin zona horaria (p. ej. filtros recibidos por query) se interpretan como UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
