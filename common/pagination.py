from dataclasses import dataclass
from math import ceil
from typing import Any, Dict, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

MAX_PAGE_SIZE = 100


@dataclass
class PaginationParams:
    """
    Reusable pagination parameters ("pagina"/"limite" in the frontend filters).
    """
    page: int = 1
    size: int = 20

    def normalized(self) -> "PaginationParams":
        return PaginationParams(page=max(1, self.page or 1), size=max(1, min(self.size or 20, MAX_PAGE_SIZE)))


async def paginate_select(
    db: AsyncSession,
    base_stmt,
    params: PaginationParams,
) -> Tuple[list[Any], Dict[str, int]]:
    """
    Simple async pagination helper for SQLAlchemy 2.0 style select statements.
    Returns (items, pagination_dict)
    """
    params = params.normalized()
    count_stmt = select(func.count()).select_from(base_stmt.order_by(None).subquery())
    total_res = await db.execute(count_stmt)
    total = int(total_res.scalar_one() or 0)
    items_res = await db.execute(base_stmt.limit(params.size).offset((params.page - 1) * params.size))
    items = list(items_res.scalars().all())
    total_pages = ceil(total / params.size) if total else 0
    return items, {"page": params.page, "size": params.size, "total": total, "total_pages": total_pages}
