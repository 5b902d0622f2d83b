import math
from dataclasses import dataclass
from typing import Literal, Optional

from sqlalchemy import Select

from app.config import get_settings
from app.exceptions import InvalidArgument

settings = get_settings()

SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class PageWindow:
    """Offset window plus ordering for one page of a list query."""

    page: int
    skip: int
    take: int
    direction: SortDirection

    def apply(self, stmt: Select, column, tiebreak=None) -> Select:
        """Order by `column` (then `tiebreak`) in the window's direction and slice."""
        order = [column.asc() if self.direction == "asc" else column.desc()]
        if tiebreak is not None:
            order.append(tiebreak.asc() if self.direction == "asc" else tiebreak.desc())
        return stmt.order_by(*order).offset(self.skip).limit(self.take)


def paginate(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort: Optional[str] = None,
) -> PageWindow:
    """
    Resolve page/limit/sort query values into a window.

    page is 1-indexed; missing values fall back to page 1, the configured
    default limit and newest-first.
    """
    page = 1 if page is None else page
    limit = settings.DEFAULT_PAGE_LIMIT if limit is None else limit
    sort = sort or "desc"

    if page < 1:
        raise InvalidArgument("page must be >= 1")
    if limit < 1:
        raise InvalidArgument("limit must be >= 1")
    if sort not in ("asc", "desc"):
        raise InvalidArgument("sort must be 'asc' or 'desc'")

    return PageWindow(page=page, skip=(page - 1) * limit, take=limit, direction=sort)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
