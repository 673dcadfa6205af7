"""
Profit & loss, cash-flow and lifetime aggregation.

All sums are integer arithmetic over whole currency units, so the report
identities (gross = revenue - cogs, net = gross - opex, net cash flow =
cash in - cash out) hold exactly. Negative results are reported as is.
"""
import logging
from typing import Dict, List, Optional, Sequence

from categorizer import ChannelCategorizer, ExpenseCategorizer
from config import EngineConfig
from schema import (
    CapitalRecord,
    CategoryBucket,
    CategoryTotal,
    ExpenseRecord,
    LifetimeReport,
    ReportView,
    RevenueRecord,
    SalesChannel,
)

logger = logging.getLogger(__name__)


class ProfitLossAggregator:
    """Revenue, cost of goods, gross and net profit for a set of records."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 categorizer: Optional[ExpenseCategorizer] = None):
        self.config = config or EngineConfig()
        self.categorizer = categorizer or ExpenseCategorizer(self.config)
        self.channels = ChannelCategorizer(self.config)

    def aggregate(self, revenue: Sequence[RevenueRecord],
                  expenses: Sequence[ExpenseRecord]) -> Dict[str, int]:
        revenue_online = 0
        revenue_offline = 0
        for record in revenue:
            if self.channels.classify(record.channel) == SalesChannel.OFFLINE:
                revenue_offline += record.amount
            else:
                revenue_online += record.amount
        total_revenue = revenue_online + revenue_offline

        cogs = 0
        opex = 0
        for record in expenses:
            bucket = self.categorizer.classify(record.category, ReportView.PROFIT_AND_LOSS)
            if bucket == CategoryBucket.COGS:
                cogs += record.amount
            elif bucket == CategoryBucket.OPEX:
                opex += record.amount

        gross_profit = total_revenue - cogs
        return {
            'revenue': total_revenue,
            'revenue_online': revenue_online,
            'revenue_offline': revenue_offline,
            'cogs': cogs,
            'gross_profit': gross_profit,
            'opex': opex,
            'net_profit': gross_profit - opex,
        }


class CashFlowAggregator:
    """Cash in (sales + capital) against cash out (capex + everything else)."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 categorizer: Optional[ExpenseCategorizer] = None):
        self.config = config or EngineConfig()
        self.categorizer = categorizer or ExpenseCategorizer(self.config)

    def aggregate(self, revenue_total: int, expenses: Sequence[ExpenseRecord],
                  capital: Sequence[CapitalRecord]) -> Dict[str, int]:
        capital_in = sum(record.amount for record in capital)

        capex = 0
        opex_cash = 0
        for record in expenses:
            if self.categorizer.is_capex(record.category):
                capex += record.amount
            else:
                # includes COGS-bucketed spend
                opex_cash += record.amount

        cash_in = revenue_total + capital_in
        cash_out = capex + opex_cash
        return {
            'capital_in': capital_in,
            'cash_in': cash_in,
            'capex': capex,
            'opex_cash': opex_cash,
            'cash_out': cash_out,
            'net_cash_flow': cash_in - cash_out,
        }


def category_breakdown(expenses: Sequence[ExpenseRecord], bucket: CategoryBucket,
                       view: ReportView, categorizer: ExpenseCategorizer) -> List[CategoryTotal]:
    """
    Total spend per operator-entered category within one bucket.

    Zero-amount records still produce a (zero) row. Rows are ordered by
    total descending, then by category name.
    """
    blank_label = categorizer.config.blank_category_label
    totals: Dict[str, int] = {}
    for record in expenses:
        if categorizer.classify(record.category, view) != bucket:
            continue
        name = record.category.strip() or blank_label
        totals[name] = totals.get(name, 0) + record.amount

    return [
        CategoryTotal(category=name, total=total)
        for name, total in sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    ]


class LifetimeTracker:
    """Capital recovery over the entire, unfiltered ledgers."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 categorizer: Optional[ExpenseCategorizer] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or EngineConfig()
        self.profit_loss = ProfitLossAggregator(self.config, categorizer)

    def track(self, revenue: Sequence[RevenueRecord], expenses: Sequence[ExpenseRecord],
              capital: Sequence[CapitalRecord]) -> LifetimeReport:
        """
        Build the lifetime report.

        Args:
            revenue: Every revenue record
            expenses: Every expense record
            capital: Every capital contribution

        Returns:
            LifetimeReport; capital_outstanding keeps its sign, negative
            means profit already exceeds the contributed capital
        """
        totals = self.profit_loss.aggregate(revenue, expenses)
        total_capital = sum(record.amount for record in capital)
        net_profit = totals['net_profit']

        if total_capital > 0:
            recovery = net_profit / total_capital * 100
        else:
            recovery = 0.0

        report = LifetimeReport(
            total_capital_contributed=total_capital,
            lifetime_revenue=totals['revenue'],
            lifetime_cogs=totals['cogs'],
            lifetime_opex=totals['opex'],
            lifetime_total_expenses=sum(record.amount for record in expenses),
            cumulative_net_profit=net_profit,
            capital_outstanding=total_capital - net_profit,
            recovery_percentage=recovery,
        )
        self.logger.info(
            f"Lifetime: capital {total_capital}, net profit {net_profit}, "
            f"recovered {recovery:.1f}%"
        )
        return report
