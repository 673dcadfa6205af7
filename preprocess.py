import re
import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional

from dateutil import parser

logger = logging.getLogger(__name__)

NON_DIGIT = re.compile(r'[^0-9]')
ISO_PREFIX = re.compile(r'^\d{4}-\d{2}-\d{2}')


def parse_amount(value: Any) -> int:
    """
    Parse Indonesian-locale currency text into a whole amount.

    '.' is only ever a thousands separator and everything after the first
    ',' is a fraction that gets discarded, not rounded. Currency symbols,
    spaces and signs are stripped.

    Args:
        value: Raw cell text, e.g. "Rp 1.234.567,89"

    Returns:
        Non-negative integer amount, 0 when nothing numeric is left
    """
    if value is None:
        return 0

    text = str(value).replace('.', '')
    text = text.split(',', 1)[0]
    digits = NON_DIGIT.sub('', text)

    if not digits:
        return 0
    return int(digits)


def parse_date(value: Any, encodings: Iterable[str], dayfirst: bool = True) -> Optional[date]:
    """
    Parse a calendar date trying each strptime encoding in order.

    Falls back to an ISO parse for year-first text, then to a generic
    dateutil parse when no encoding matches.

    Args:
        value: Raw cell text
        encodings: strptime patterns, first match wins
        dayfirst: Ambiguity hint for the generic fallback

    Returns:
        The parsed date, or None when the text is unparsable
    """
    if value is None:
        return None

    text = str(value).strip()
    if not text:
        return None

    for encoding in encodings:
        try:
            return datetime.strptime(text, encoding).date()
        except ValueError:
            continue

    # Year-first text is never day-first, e.g. Excel cells "2025-01-05 00:00:00"
    if ISO_PREFIX.match(text):
        try:
            return parser.isoparse(text).date()
        except (ValueError, OverflowError):
            pass

    try:
        return parser.parse(text, dayfirst=dayfirst).date()
    except (ValueError, OverflowError):
        return None


class FieldParser:
    """Converts raw ledger cell text into typed values."""

    def __init__(self, encodings: Iterable[str], dayfirst: bool = True):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.encodings = list(encodings)
        self.dayfirst = dayfirst

    def parse_amount(self, value: Any) -> int:
        amount = parse_amount(value)
        if amount == 0 and value not in (None, '') and str(value).strip():
            self.logger.debug(f"Amount text parsed as zero: {value!r}")
        return amount

    def parse_date(self, value: Any) -> Optional[date]:
        parsed = parse_date(value, self.encodings, self.dayfirst)
        if parsed is None and value is not None and str(value).strip():
            self.logger.debug(f"Could not parse date: {value!r}")
        return parsed
