"""
Report engine: raw ledgers + window -> period and lifetime reports.

``compute_reports`` is a pure function of its inputs. ``ReportEngine``
wraps it with a cache that is discarded whenever the ledgers are replaced.
"""
import logging
from datetime import date
from typing import Dict, Optional, Tuple

from aggregator import CashFlowAggregator, LifetimeTracker, ProfitLossAggregator, category_breakdown
from categorizer import ExpenseCategorizer
from config import EngineConfig
from extractor import LedgerExtractor
from period import bucket_trend, filter_by_period
from schema import CategoryBucket, LifetimeReport, PeriodReport, RawLedgers, ReportView, ReportWindow

logger = logging.getLogger(__name__)


def compute_period_report(ledgers: RawLedgers, window: ReportWindow,
                          config: Optional[EngineConfig] = None,
                          today: Optional[date] = None) -> PeriodReport:
    config = config or EngineConfig()
    today = today or date.today()
    extractor = LedgerExtractor(config)
    categorizer = ExpenseCategorizer(config)
    policy = config.period_date_fallback

    revenue = filter_by_period(extractor.extract_revenue(ledgers.revenue, policy, today), window)
    expenses = filter_by_period(extractor.extract_expenses(ledgers.expenses, policy, today), window)
    capital = filter_by_period(extractor.extract_capital(ledgers.capital, policy, today), window)

    profit_loss = ProfitLossAggregator(config, categorizer).aggregate(revenue, expenses)
    cash_flow = CashFlowAggregator(config, categorizer).aggregate(profit_loss['revenue'], expenses, capital)
    monthly, trend = bucket_trend(revenue, window, config)

    report = PeriodReport(
        window=window,
        total_expenses=sum(record.amount for record in expenses),
        monthly_trend=monthly,
        trend=trend,
        cogs_breakdown=category_breakdown(expenses, CategoryBucket.COGS, ReportView.PROFIT_AND_LOSS, categorizer),
        opex_breakdown=category_breakdown(expenses, CategoryBucket.OPEX, ReportView.PROFIT_AND_LOSS, categorizer),
        capex_breakdown=category_breakdown(expenses, CategoryBucket.CAPEX, ReportView.CASH_FLOW, categorizer),
        **profit_loss,
        **cash_flow,
    )
    logger.info(
        f"Period {window.start} - {window.end}: revenue {report.revenue}, "
        f"net profit {report.net_profit}, net cash flow {report.net_cash_flow}"
    )
    return report


def compute_lifetime_report(ledgers: RawLedgers, config: Optional[EngineConfig] = None,
                            today: Optional[date] = None) -> LifetimeReport:
    config = config or EngineConfig()
    today = today or date.today()
    extractor = LedgerExtractor(config)
    policy = config.lifetime_date_fallback

    return LifetimeTracker(config).track(
        extractor.extract_revenue(ledgers.revenue, policy, today),
        extractor.extract_expenses(ledgers.expenses, policy, today),
        extractor.extract_capital(ledgers.capital, policy, today),
    )


def compute_reports(ledgers: RawLedgers, window: ReportWindow,
                    config: Optional[EngineConfig] = None,
                    today: Optional[date] = None) -> Tuple[PeriodReport, LifetimeReport]:
    """
    Compute both reports from one ledger snapshot.

    Args:
        ledgers: All three raw ledgers
        window: Inclusive period for the period report
        config: Classification rules and parsing policy
        today: Reference date for the DEFAULT_TO_TODAY date fallback

    Returns:
        Tuple of (PeriodReport, LifetimeReport)
    """
    config = config or EngineConfig()
    today = today or date.today()
    return (
        compute_period_report(ledgers, window, config, today),
        compute_lifetime_report(ledgers, config, today),
    )


class ReportEngine:
    """Holds the current ledger snapshot and memoizes reports on it."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or EngineConfig()
        self.ledgers: Optional[RawLedgers] = None
        self._period_cache: Dict[Tuple[ReportWindow, date], PeriodReport] = {}
        self._lifetime: Optional[LifetimeReport] = None

    def load(self, ledgers: RawLedgers) -> None:
        """Replace the ledger snapshot, discarding every cached report."""
        self.ledgers = ledgers
        self._period_cache.clear()
        self._lifetime = None
        self.logger.info(
            f"Loaded ledgers: {len(ledgers.revenue)} revenue, "
            f"{len(ledgers.expenses)} expense, {len(ledgers.capital)} capital rows"
        )

    def _require_ledgers(self) -> RawLedgers:
        if self.ledgers is None:
            raise RuntimeError("No ledgers loaded")
        return self.ledgers

    def period_report(self, window: ReportWindow, today: Optional[date] = None) -> PeriodReport:
        ledgers = self._require_ledgers()
        key = (window, today or date.today())
        if key not in self._period_cache:
            self._period_cache[key] = compute_period_report(ledgers, window, self.config, key[1])
        return self._period_cache[key]

    def lifetime_report(self, today: Optional[date] = None) -> LifetimeReport:
        """Lifetime report for the loaded snapshot, cached until the next load.

        Not keyed on ``today``: lifetime totals never look at record dates,
        so a row dated "today" by DEFAULT_TO_TODAY contributes the same
        amount whichever day that is.
        """
        ledgers = self._require_ledgers()
        if self._lifetime is None:
            self._lifetime = compute_lifetime_report(ledgers, self.config, today)
        return self._lifetime

    def reports(self, window: ReportWindow,
                today: Optional[date] = None) -> Tuple[PeriodReport, LifetimeReport]:
        return self.period_report(window, today), self.lifetime_report(today)
