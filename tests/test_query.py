from decimal import Decimal

from sqlalchemy import select

from profitpulse.core.config import settings
from profitpulse.core.money import to_money
from profitpulse.core.query import ListQuery, apply_filters, search_clause
from profitpulse.models.item import Item
from profitpulse.services.items_service import ITEM_SORT


def test_list_query_normalizes_paging():
    query = ListQuery.build(page=0, limit=10_000, search="  ", sort_by=" name ", sort_order="ASC")
    assert query.page == 1
    assert query.limit == settings.max_page_size
    assert query.search is None
    assert query.sort_by == "name"
    assert query.ascending is True

    defaults = ListQuery.build()
    assert defaults.limit == settings.default_page_size
    assert defaults.offset == 0
    assert defaults.ascending is False

    assert ListQuery.build(page=3, limit=25).offset == 50
    assert ListQuery.build(limit=-4).limit == 1


def test_sort_spec_uses_allow_list():
    assert ITEM_SORT.column_for("name") is Item.name
    assert ITEM_SORT.column_for("password_hash") is Item.created_at
    assert ITEM_SORT.column_for(None) is Item.created_at


def test_search_clause_escapes_wildcards():
    assert search_clause(None, [Item.name]) is None
    clause = search_clause("50%_off", [Item.name])
    compiled = clause.compile()
    assert "%50\\%\\_off%" in compiled.params.values()


def test_apply_filters_skips_missing_clauses():
    count_stmt, data_stmt = apply_filters([select(Item.item_id), select(Item)], None, None)
    assert count_stmt.whereclause is None
    assert data_stmt.whereclause is None

    filtered = apply_filters([select(Item)], Item.qty_in_stock <= Item.reorder_level, None)
    assert filtered[0].whereclause is not None


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(None) == Decimal("0.00")
    assert to_money(1) == Decimal("1.00")
