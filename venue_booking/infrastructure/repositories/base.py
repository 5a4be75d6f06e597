# venue_booking/infrastructure/repositories/base.py

from dataclasses import dataclass
import math
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def order_clauses(sort_column: Any, sort_order: str, model: Any) -> list:
    """
    Primary sort plus a created_at/id tiebreak so equal keys
    come back in the same order on every page.
    """
    primary = sort_column.desc() if sort_order == "desc" else sort_column.asc()
    clauses = [primary]
    if sort_column is not model.created_at:
        clauses.append(model.created_at.desc())
    clauses.append(model.id.asc())
    return clauses


def paginate(
    db: Session,
    stmt: Select,
    page: int,
    limit: int,
    order_by: Sequence[Any],
) -> Page:
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = db.execute(count_stmt).scalar_one()

    paged = stmt.order_by(*order_by).offset((page - 1) * limit).limit(limit)
    items = list(db.execute(paged).scalars().all())

    return Page(items=items, page=page, limit=limit, total=total)
