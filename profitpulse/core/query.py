"""Helpers for building paginated, filtered listing queries.

Every listing service builds a ``select`` for the rows and a matching
``select(count)`` for the total, applies the same filters to both, then asks
``ListQuery`` for ordering and paging. User input only ever reaches SQL as a
bound parameter; sort columns are looked up in an explicit allow-list and never
interpolated.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, or_
from sqlalchemy.orm import InstrumentedAttribute

from profitpulse.core.config import settings


@dataclass(frozen=True)
class SortSpec:
    allowed: Mapping[str, Any]
    default: str
    tiebreak: Any

    def column_for(self, requested: str | None) -> Any:
        # Unknown values fall back to the default column; they never raise.
        key = requested if requested in self.allowed else self.default
        return self.allowed[key]


@dataclass(frozen=True)
class ListQuery:
    page: int = 1
    limit: int = 20
    search: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None

    @classmethod
    def build(
        cls,
        *,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> "ListQuery":
        normalized_page = max(int(page or 1), 1)
        normalized_limit = int(limit or settings.default_page_size)
        normalized_limit = min(max(normalized_limit, 1), settings.max_page_size)
        cleaned_search = (search or "").strip() or None
        return cls(
            page=normalized_page,
            limit=normalized_limit,
            search=cleaned_search,
            sort_by=(sort_by or "").strip() or None,
            sort_order=(sort_order or "").strip().lower() or None,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ascending(self) -> bool:
        return self.sort_order == "asc"

    def order(self, stmt: Select, spec: SortSpec) -> Select:
        column = spec.column_for(self.sort_by)
        if self.ascending:
            return stmt.order_by(column.asc(), spec.tiebreak.asc())
        return stmt.order_by(column.desc(), spec.tiebreak.desc())

    def paginate(self, stmt: Select, spec: SortSpec) -> Select:
        return self.order(stmt, spec).offset(self.offset).limit(self.limit)


def search_clause(term: str | None, columns: Sequence[InstrumentedAttribute]):
    if not term:
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return or_(*[column.ilike(pattern, escape="\\") for column in columns])


def apply_filters(statements: Sequence[Select], *clauses) -> list[Select]:
    """Apply the same where-clauses to each statement, skipping ``None``."""
    active = [clause for clause in clauses if clause is not None]
    if not active:
        return list(statements)
    return [stmt.where(*active) for stmt in statements]
