from collections.abc import Iterator

from fastapi import Query
from sqlalchemy.orm import Session

from profitpulse.core.query import ListQuery
from profitpulse.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_list_query(
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    search: str | None = Query(default=None),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> ListQuery:
    return ListQuery.build(
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
