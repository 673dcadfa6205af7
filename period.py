import logging
from typing import Dict, Iterable, List, Optional, Tuple, TypeVar

from config import EngineConfig
from schema import ReportWindow, RevenueRecord, TrendPoint

logger = logging.getLogger(__name__)

R = TypeVar('R')


def filter_by_period(records: Iterable[R], window: ReportWindow) -> List[R]:
    """Records dated inside the window, both boundary days included."""
    return [record for record in records if window.contains(record.date)]


def is_monthly_window(window: ReportWindow, config: Optional[EngineConfig] = None) -> bool:
    config = config or EngineConfig()
    return window.days > config.monthly_bucket_threshold_days


def bucket_trend(records: Iterable[RevenueRecord], window: ReportWindow,
                 config: Optional[EngineConfig] = None) -> Tuple[bool, List[TrendPoint]]:
    """
    Sum revenue per day, or per month for long windows.

    Only buckets with at least one record are emitted, so the series can
    have gaps.

    Args:
        records: Revenue records already filtered to the window
        window: The requested window, decides the bucket size
        config: Threshold and month labels

    Returns:
        Tuple of (monthly, points sorted by bucket start)
    """
    config = config or EngineConfig()
    monthly = is_monthly_window(window, config)
    months = config.month_abbreviations

    totals: Dict = {}
    for record in records:
        if monthly:
            key = record.date.replace(day=1)
            label = f"{months[key.month - 1]} {key.year}"
        else:
            key = record.date
            label = f"{key.day:02d} {months[key.month - 1]}"

        if key not in totals:
            totals[key] = [label, 0]
        totals[key][1] += record.amount

    points = [
        TrendPoint(label=label, total_revenue=total, bucket_start=key)
        for key, (label, total) in sorted(totals.items())
    ]
    logger.debug(f"Trend: {len(points)} {'monthly' if monthly else 'daily'} buckets")
    return monthly, points
