from sqlmodel import SQLModel
from typing import Any, Dict, Sequence


class PageMetadata(SQLModel):
    total_count: int
    limit: int
    offset: int


def paginate(items: Sequence[Any], limit: int, offset: int) -> Dict[str, Any]:
    """Arma la respuesta {"data": [...], "metadata": {...}} de los listados."""
    return {
        "data": list(items[offset:offset + limit]),
        "metadata": {
            "total_count": len(items),
            "limit": limit,
            "offset": offset,
        },
    }
