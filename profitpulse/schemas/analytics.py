from pydantic import BaseModel


class StatCardOut(BaseModel):
    value: float
    change: float | None = None
    trend: list[float]


class OverviewStatsOut(BaseModel):
    monthRevenue: StatCardOut
    totalItems: StatCardOut
    lowStockCount: StatCardOut
    monthExpenses: StatCardOut


class OverviewTrendsOut(BaseModel):
    months: list[str]
    revenue: list[float]
    expenses: list[float]
    newItems: list[int]


class TopItemOut(BaseModel):
    item_id: int
    name: str | None = None
    qty: int


class OverviewOut(BaseModel):
    stats: OverviewStatsOut
    trends: OverviewTrendsOut
    topItems: list[TopItemOut]


class MonthlyOut(BaseModel):
    year: int
    month: int
    totalRevenue: float
    totalExpenses: float
    netProfit: float


class ExpenseStatsOut(BaseModel):
    today: float
    week: float
    month: float
    year: float
