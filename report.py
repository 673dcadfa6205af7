"""
Command-line entry point: ledger files in, period and lifetime reports out.
"""
import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from config import load_config
from engine import ReportEngine
from file_loader import FileLoader
from schema import LifetimeReport, PeriodReport, RawLedgers, ReportWindow

logger = logging.getLogger(__name__)


def format_idr(value: int) -> str:
    """Rupiah with '.' thousands separators and no fraction, e.g. Rp -1.500.000."""
    sign = '-' if value < 0 else ''
    return f"Rp {sign}{abs(value):,}".replace(',', '.')


def load_ledgers(revenue_path: str, expenses_path: str, capital_path: str,
                 loader: Optional[FileLoader] = None) -> RawLedgers:
    """Load the three ledger files in parallel; returns only when all are read."""
    loader = loader or FileLoader()
    with ThreadPoolExecutor(max_workers=3) as pool:
        revenue = pool.submit(loader.load_rows, revenue_path)
        expenses = pool.submit(loader.load_rows, expenses_path)
        capital = pool.submit(loader.load_rows, capital_path)
        return RawLedgers(revenue=revenue.result(), expenses=expenses.result(),
                          capital=capital.result())


def resolve_window(start: Optional[date], end: Optional[date], month: Optional[str],
                   today: date) -> ReportWindow:
    if month:
        year, month_number = (int(part) for part in month.split('-'))
        return ReportWindow.for_month(year, month_number)
    if start is None and end is None:
        return ReportWindow.trailing_months(today)
    default = ReportWindow.trailing_months(today)
    return ReportWindow(start=start or default.start, end=end or default.end)


def print_summary(period: PeriodReport, lifetime: LifetimeReport) -> None:
    print(f"\nPeriod {period.window.start} - {period.window.end}:")
    print(f"- Revenue: {format_idr(period.revenue)} "
          f"(online {format_idr(period.revenue_online)}, offline {format_idr(period.revenue_offline)})")
    print(f"- Gross profit: {format_idr(period.gross_profit)}")
    print(f"- Net profit: {format_idr(period.net_profit)}")
    print(f"- Net cash flow: {format_idr(period.net_cash_flow)}")

    print(f"\nLifetime:")
    print(f"- Capital contributed: {format_idr(lifetime.total_capital_contributed)}")
    print(f"- Cumulative net profit: {format_idr(lifetime.cumulative_net_profit)}")
    if lifetime.is_recovered:
        print(f"- Surplus: {format_idr(abs(lifetime.capital_outstanding))}")
    else:
        print(f"- Capital outstanding: {format_idr(lifetime.capital_outstanding)}")
    print(f"- Recovered: {lifetime.recovery_percentage:.1f}%")


def _iso_date(value: str) -> date:
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Build profit & loss, cash-flow and break-even reports')
    parser.add_argument('--revenue', required=True, help='Revenue ledger (CSV/Excel)')
    parser.add_argument('--expenses', required=True, help='Expense ledger (CSV/Excel)')
    parser.add_argument('--capital', required=True, help='Capital contribution ledger (CSV/Excel)')
    parser.add_argument('--start', type=_iso_date, help='Window start, YYYY-MM-DD')
    parser.add_argument('--end', type=_iso_date, help='Window end, YYYY-MM-DD')
    parser.add_argument('--month', help='Report a single month, YYYY-MM')
    parser.add_argument('--config', help='Engine config JSON file')
    parser.add_argument('-o', '--output', help='Output JSON file path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    for file_path in (args.revenue, args.expenses, args.capital):
        if not Path(file_path).exists():
            print(f"Error: File not found - {file_path}")
            sys.exit(1)

    try:
        today = date.today()
        window = resolve_window(args.start, args.end, args.month, today)

        engine = ReportEngine(load_config(args.config))
        engine.load(load_ledgers(args.revenue, args.expenses, args.capital))
        period, lifetime = engine.reports(window, today)

        output_data = {
            'period': period.model_dump(mode='json'),
            'lifetime': lifetime.model_dump(mode='json'),
        }

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(output_data, f, indent=2, ensure_ascii=False)
            print(f"Results written to: {args.output}")
        else:
            print(json.dumps(output_data, indent=2, ensure_ascii=False))

        print_summary(period, lifetime)

    except (ValueError, OSError) as e:
        logger.error(f"Report failed: {str(e)}")
        print(f"Error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
