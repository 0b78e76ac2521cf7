from profitpulse.models.admin import Admin, AdminRole
from profitpulse.models.item import Item, ItemStatus
from profitpulse.models.sales import Sale, SaleItem
from profitpulse.models.expense import Expense
from profitpulse.models.audit import Audit, AuditAction
