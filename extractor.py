import re
import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from rapidfuzz import fuzz, process

from config import DateFallbackPolicy, EngineConfig
from preprocess import FieldParser
from schema import CapitalRecord, ExpenseRecord, LedgerKind, RevenueRecord

logger = logging.getLogger(__name__)

LedgerRecord = Union[RevenueRecord, ExpenseRecord, CapitalRecord]

# Logical fields each ledger needs, in the order they are mapped.
LEDGER_FIELDS = {
    LedgerKind.REVENUE: {'date': 'date', 'channel': 'channel', 'amount': 'revenue_amount'},
    LedgerKind.EXPENSE: {'date': 'date', 'category': 'category', 'amount': 'expense_amount'},
    LedgerKind.CAPITAL: {'date': 'date', 'label': 'label', 'amount': 'capital_amount'},
}


def header_key(name: Any) -> str:
    """Header comparison key: case-folded, without spaces, '_' or '-'."""
    return re.sub(r'[\s_\-]+', '', str(name)).casefold()


class LedgerExtractor:
    """Maps raw ledger rows onto canonical records."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or EngineConfig()
        self.parsers = {
            kind: FieldParser(self.config.encodings_for(kind), self.config.fallback_dayfirst)
            for kind in LedgerKind
        }

    def map_columns(self, headers: Sequence[str], kind: LedgerKind) -> Dict[str, str]:
        """
        Map the ledger's headers to logical field names.

        Args:
            headers: Column names as they appear in the source rows
            kind: Which ledger the headers belong to

        Returns:
            Dict of logical field -> original header, fields without a
            matching header are left out
        """
        keyed = {}
        for header in headers:
            keyed.setdefault(header_key(header), header)

        column_map = {}
        taken = set()
        for field_name, alias_group in LEDGER_FIELDS[kind].items():
            aliases = [header_key(alias) for alias in self.config.column_aliases.get(alias_group, [])]
            available = {key: header for key, header in keyed.items() if header not in taken}

            header = self._match_exact(aliases, available) or self._match_fuzzy(aliases, available)
            if header is not None:
                column_map[field_name] = header
                taken.add(header)

        self.logger.info(f"{kind.value} column mapping: {column_map}")
        return column_map

    def _match_exact(self, aliases: List[str], available: Dict[str, str]) -> Optional[str]:
        for alias in aliases:
            if alias in available:
                return available[alias]
        return None

    def _match_fuzzy(self, aliases: List[str], available: Dict[str, str]) -> Optional[str]:
        if not available:
            return None

        best_header = None
        best_score = 0.0
        for alias in aliases:
            match = process.extractOne(
                alias, list(available.keys()),
                scorer=fuzz.ratio,
                score_cutoff=self.config.column_match_threshold,
            )
            if match and match[1] > best_score:
                best_header = available[match[0]]
                best_score = match[1]

        if best_header is not None:
            self.logger.debug(f"Fuzzy header match {best_header!r} (score {best_score:.1f})")
        return best_header

    def extract(self, rows: Sequence[Mapping[str, Any]], kind: LedgerKind,
                policy: DateFallbackPolicy, today: date) -> List[LedgerRecord]:
        """
        Normalize one ledger's rows into records.

        Args:
            rows: Tokenized rows, column name -> text
            kind: Ledger kind, selects columns and record type
            policy: Handling of non-blank but unparsable dates
            today: Date used by DEFAULT_TO_TODAY

        Returns:
            List of RevenueRecord, ExpenseRecord or CapitalRecord
        """
        headers = list(dict.fromkeys(key for row in rows for key in row.keys()))
        column_map = self.map_columns(headers, kind)
        parser = self.parsers[kind]

        records = []
        skipped = 0
        for idx, row in enumerate(rows):
            if not any(_text(v) for v in row.values()):
                skipped += 1
                continue

            date_text = _text(row.get(column_map.get('date', ''), ''))
            if not date_text:
                skipped += 1
                continue

            record_date = parser.parse_date(date_text)
            if record_date is None:
                if policy == DateFallbackPolicy.DROP:
                    self.logger.debug(f"Dropping {kind.value} row {idx}: unparsable date {date_text!r}")
                    skipped += 1
                    continue
                record_date = today

            amount = parser.parse_amount(row.get(column_map.get('amount', ''), ''))
            records.append(self._build(kind, row, column_map, record_date, amount))

        self.logger.info(f"Extracted {len(records)} {kind.value} records ({skipped} skipped)")
        return records

    def _build(self, kind: LedgerKind, row: Mapping[str, Any], column_map: Dict[str, str],
               record_date: date, amount: int) -> LedgerRecord:
        if kind == LedgerKind.REVENUE:
            return RevenueRecord(date=record_date, amount=amount,
                                 channel=_text(row.get(column_map.get('channel', ''), '')))
        if kind == LedgerKind.EXPENSE:
            return ExpenseRecord(date=record_date, amount=amount,
                                 category=_text(row.get(column_map.get('category', ''), '')))
        return CapitalRecord(date=record_date, amount=amount,
                             label=_text(row.get(column_map.get('label', ''), '')))

    def extract_revenue(self, rows, policy, today) -> List[RevenueRecord]:
        return self.extract(rows, LedgerKind.REVENUE, policy, today)

    def extract_expenses(self, rows, policy, today) -> List[ExpenseRecord]:
        return self.extract(rows, LedgerKind.EXPENSE, policy, today)

    def extract_capital(self, rows, policy, today) -> List[CapitalRecord]:
        return self.extract(rows, LedgerKind.CAPITAL, policy, today)


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()
