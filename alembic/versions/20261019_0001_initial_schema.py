"""initial schema: admins, items, sales, sale items, expenses, audits

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(inspector: sa.Inspector, table_name: str) -> bool:
    return table_name in inspector.get_table_names()


def _index_exists(inspector: sa.Inspector, table_name: str, index_name: str) -> bool:
    return index_name in {index["name"] for index in inspector.get_indexes(table_name)}


def _create_index(
    inspector: sa.Inspector,
    name: str,
    table_name: str,
    columns: list,
    *,
    unique: bool = False,
) -> None:
    if not _index_exists(inspector, table_name, name):
        op.create_index(name, table_name, columns, unique=unique)


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not _table_exists(inspector, "admins"):
        op.create_table(
            "admins",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("username", sa.String(length=50), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("full_name", sa.String(length=100), nullable=True),
            sa.Column("password_hash", sa.String(length=255), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False),
            sa.Column("password_reset_token", sa.String(length=64), nullable=True),
            sa.Column("password_reset_expires", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    if not _table_exists(inspector, "items"):
        op.create_table(
            "items",
            sa.Column("item_id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("item_number", sa.String(length=50), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", sa.String(length=100), nullable=True),
            sa.Column("sku", sa.String(length=100), nullable=True),
            sa.Column("barcode", sa.String(length=100), nullable=True),
            sa.Column("image_url", sa.String(length=500), nullable=True),
            sa.Column("qty_in_stock", sa.Integer(), server_default="0", nullable=False),
            sa.Column("reorder_level", sa.Integer(), server_default="0", nullable=False),
            sa.Column("purchase_price", sa.Numeric(12, 2), server_default="0", nullable=False),
            sa.Column("selling_price", sa.Numeric(12, 2), nullable=False),
            sa.Column("status", sa.String(length=20), server_default="active", nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("item_id"),
        )

    if not _table_exists(inspector, "sales"):
        op.create_table(
            "sales",
            sa.Column("sale_id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("sale_number", sa.String(length=50), nullable=False),
            sa.Column("admin_id", sa.Integer(), nullable=False),
            sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("tax_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
            sa.Column("discount_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
            sa.Column("payment_method", sa.String(length=30), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.ForeignKeyConstraint(["admin_id"], ["admins.id"]),
            sa.PrimaryKeyConstraint("sale_id"),
        )

    if not _table_exists(inspector, "sale_items"):
        op.create_table(
            "sale_items",
            sa.Column("sale_item_id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("sale_id", sa.Integer(), nullable=False),
            sa.Column("item_id", sa.Integer(), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False),
            sa.Column("price_at_sale", sa.Numeric(12, 2), nullable=False),
            sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
            sa.ForeignKeyConstraint(["sale_id"], ["sales.sale_id"]),
            sa.ForeignKeyConstraint(["item_id"], ["items.item_id"]),
            sa.PrimaryKeyConstraint("sale_item_id"),
        )

    if not _table_exists(inspector, "expenses"):
        op.create_table(
            "expenses",
            sa.Column("expense_id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("admin_id", sa.Integer(), nullable=False),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column("category", sa.String(length=50), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("receipt_url", sa.String(length=500), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.ForeignKeyConstraint(["admin_id"], ["admins.id"]),
            sa.PrimaryKeyConstraint("expense_id"),
        )

    if not _table_exists(inspector, "audits"):
        op.create_table(
            "audits",
            sa.Column("audit_id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("admin_id", sa.Integer(), nullable=False),
            sa.Column("action", sa.String(length=20), nullable=False),
            sa.Column("resource", sa.String(length=50), nullable=False),
            sa.Column("resource_id", sa.String(length=50), nullable=True),
            sa.Column("before_state", sa.JSON(), nullable=True),
            sa.Column("after_state", sa.JSON(), nullable=True),
            sa.Column("ip_address", sa.String(length=64), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.ForeignKeyConstraint(["admin_id"], ["admins.id"]),
            sa.PrimaryKeyConstraint("audit_id"),
        )

    inspector = sa.inspect(bind)
    _create_index(inspector, "ix_admins_username", "admins", ["username"], unique=True)
    _create_index(inspector, "ix_admins_email", "admins", ["email"], unique=True)
    _create_index(inspector, "ix_admins_password_reset_token", "admins", ["password_reset_token"])
    _create_index(inspector, "ux_admins_username_lower", "admins", [sa.text("lower(username)")], unique=True)

    _create_index(inspector, "ix_items_item_number", "items", ["item_number"], unique=True)
    _create_index(inspector, "ux_items_item_number_lower", "items", [sa.text("lower(item_number)")], unique=True)
    _create_index(inspector, "ix_items_status_created_at", "items", ["status", "created_at"])
    _create_index(inspector, "ix_items_status_name", "items", ["status", "name"])

    _create_index(inspector, "ix_sales_sale_number", "sales", ["sale_number"])
    _create_index(inspector, "ix_sales_admin_id", "sales", ["admin_id"])
    _create_index(inspector, "ix_sales_created_at_sale_id", "sales", ["created_at", "sale_id"])

    _create_index(inspector, "ix_sale_items_sale_id", "sale_items", ["sale_id"])
    _create_index(inspector, "ix_sale_items_item_id", "sale_items", ["item_id"])

    _create_index(inspector, "ix_expenses_admin_id", "expenses", ["admin_id"])
    _create_index(inspector, "ix_expenses_date_expense_id", "expenses", ["date", "expense_id"])
    _create_index(inspector, "ix_expenses_category_date", "expenses", ["category", "date"])

    _create_index(inspector, "ix_audits_admin_id", "audits", ["admin_id"])
    _create_index(inspector, "ix_audits_resource_id", "audits", ["resource_id"])
    _create_index(inspector, "ix_audits_created_at_audit_id", "audits", ["created_at", "audit_id"])
    _create_index(inspector, "ix_audits_action_created_at", "audits", ["action", "created_at"])
    _create_index(inspector, "ix_audits_resource_created_at", "audits", ["resource", "created_at"])


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    # Children first so foreign keys never dangle.
    for table_name in ("audits", "expenses", "sale_items", "sales", "items", "admins"):
        if _table_exists(inspector, table_name):
            op.drop_table(table_name)
