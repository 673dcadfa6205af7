import calendar
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LedgerKind(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"
    CAPITAL = "capital"


class CategoryBucket(str, Enum):
    """Accounting bucket an expense category resolves to."""
    COGS = "COGS"
    OPEX = "OPEX"
    CAPEX = "CAPEX"


class SalesChannel(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class ReportView(str, Enum):
    """Which statement a classification is made for.

    A category listed both as COGS and as CAPEX is a cost of goods in the
    profit-and-loss view and a capital outflow in the cash-flow view.
    """
    PROFIT_AND_LOSS = "profit_and_loss"
    CASH_FLOW = "cash_flow"


class RevenueRecord(BaseModel):
    """One sale as recorded in the revenue ledger."""
    model_config = ConfigDict(frozen=True)

    date: date
    channel: str = ""
    amount: int = Field(0, ge=0)


class ExpenseRecord(BaseModel):
    """One spend line; its bucket is derived from the category text."""
    model_config = ConfigDict(frozen=True)

    date: date
    category: str = ""
    amount: int = Field(0, ge=0)


class CapitalRecord(BaseModel):
    """A capital injection. Always cash-in, never part of profit and loss."""
    model_config = ConfigDict(frozen=True)

    date: date
    label: str = ""
    amount: int = Field(0, ge=0)


class RawLedgers(BaseModel):
    """Snapshot of the three tokenized ledgers, column name -> text value."""
    model_config = ConfigDict(frozen=True)

    revenue: Sequence[Mapping[str, Any]]
    expenses: Sequence[Mapping[str, Any]]
    capital: Sequence[Mapping[str, Any]]


class ReportWindow(BaseModel):
    """Inclusive reporting interval at whole-day granularity."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @field_validator('start', 'end', mode='before')
    @classmethod
    def drop_time_of_day(cls, v):
        """Floor/ceil to the day by discarding the time component."""
        if isinstance(v, datetime):
            return v.date()
        return v

    @model_validator(mode='after')
    def check_order(self):
        if self.start > self.end:
            raise ValueError(f'Window start {self.start} is after end {self.end}')
        return self

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def for_month(cls, year: int, month: int) -> 'ReportWindow':
        last_day = calendar.monthrange(year, month)[1]
        return cls(start=date(year, month, 1), end=date(year, month, last_day))

    @classmethod
    def trailing_months(cls, today: date, months: int = 6) -> 'ReportWindow':
        return cls(start=today - relativedelta(months=months), end=today)


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    total_revenue: int
    bucket_start: date


class CategoryTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    total: int


class PeriodReport(BaseModel):
    """Profit & loss, cash flow and revenue trend for one window."""
    model_config = ConfigDict(frozen=True)

    window: ReportWindow

    # Profit and loss
    revenue: int = 0
    revenue_online: int = 0
    revenue_offline: int = 0
    cogs: int = 0
    gross_profit: int = 0
    opex: int = 0
    net_profit: int = 0

    # Cash flow
    capital_in: int = 0
    cash_in: int = 0
    capex: int = 0
    opex_cash: int = 0
    cash_out: int = 0
    net_cash_flow: int = 0
    total_expenses: int = 0

    monthly_trend: bool = False
    trend: List[TrendPoint] = Field(default_factory=list)

    cogs_breakdown: List[CategoryTotal] = Field(default_factory=list)
    opex_breakdown: List[CategoryTotal] = Field(default_factory=list)
    capex_breakdown: List[CategoryTotal] = Field(default_factory=list)

    def breakdown_map(self, bucket: CategoryBucket) -> Dict[str, int]:
        rows = {
            CategoryBucket.COGS: self.cogs_breakdown,
            CategoryBucket.OPEX: self.opex_breakdown,
            CategoryBucket.CAPEX: self.capex_breakdown,
        }[bucket]
        return {row.category: row.total for row in rows}


class LifetimeReport(BaseModel):
    """Capital recovery ("break-even") over the full, unfiltered ledgers."""
    model_config = ConfigDict(frozen=True)

    total_capital_contributed: int = 0
    lifetime_revenue: int = 0
    lifetime_cogs: int = 0
    lifetime_opex: int = 0
    lifetime_total_expenses: int = 0
    cumulative_net_profit: int = 0
    capital_outstanding: int = 0
    recovery_percentage: float = 0.0

    @property
    def is_recovered(self) -> bool:
        """True once profit has paid back all contributed capital.

        A negative ``capital_outstanding`` is the surplus beyond break-even.
        """
        return self.capital_outstanding <= 0
