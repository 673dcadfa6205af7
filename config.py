"""
Deployment configuration for the report engine.

Category names, channel matchers and date encodings are domain policy that
differ per business, so they are read from configuration rather than
hard-coded in the classifiers.
"""
import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schema import CategoryBucket, LedgerKind

logger = logging.getLogger(__name__)


class DateFallbackPolicy(str, Enum):
    """What to do with a row whose date text cannot be parsed.

    Period reports historically dated such rows "today" (so they fall
    outside most windows) while the lifetime totals dropped them. Both
    behaviours are kept as explicit choices.
    """
    DEFAULT_TO_TODAY = "default_to_today"
    DROP = "drop"


DEFAULT_COLUMN_ALIASES = {
    'date': ['tanggal', 'tgl', 'date', 'transaction_date'],
    'channel': ['channel_penjualan', 'channel', 'saluran', 'sales_channel'],
    'category': ['kategori_biaya', 'kategori', 'category', 'expense_category'],
    'label': ['keterangan', 'label', 'description', 'memo'],
    'revenue_amount': ['nominal_omset', 'omset', 'nominal', 'amount', 'revenue'],
    'expense_amount': ['nominal_biaya', 'biaya', 'nominal', 'amount', 'expense'],
    'capital_amount': ['nominal_modal', 'modal', 'nominal', 'amount', 'capital'],
}

ISO_ENCODINGS = ['%Y-%m-%d', '%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M:%S']

INDONESIAN_MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'Mei', 'Jun',
                     'Jul', 'Agt', 'Sep', 'Okt', 'Nov', 'Des']


def normalize_label(text: str) -> str:
    """Trim, case-fold and collapse inner whitespace."""
    return re.sub(r'\s+', ' ', str(text).strip()).casefold()


class EngineConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

    cogs_category_names: Set[str] = {'belanja bahan baku', 'modal bahan baku'}
    capex_category_names: Set[str] = {'modal operasional', 'modal bahan baku'}
    opex_category_allowlist: Set[str] = {'operasional', 'marketing', 'gaji', 'r&d'}
    default_expense_bucket: CategoryBucket = CategoryBucket.OPEX

    offline_channel_matchers: Set[str] = {'offline', 'kedai'}

    date_encodings: List[str] = ISO_ENCODINGS + ['%d/%m/%Y', '%m/%d/%Y', '%d-%m-%Y', '%d.%m.%Y']
    # Revenue sheets are exported day-first, expense sheets month-first
    ledger_date_encodings: Dict[LedgerKind, List[str]] = {
        LedgerKind.REVENUE: ['%d/%m/%Y'] + ISO_ENCODINGS,
        LedgerKind.EXPENSE: ['%m/%d/%Y'] + ISO_ENCODINGS,
    }
    fallback_dayfirst: bool = True
    period_date_fallback: DateFallbackPolicy = DateFallbackPolicy.DEFAULT_TO_TODAY
    lifetime_date_fallback: DateFallbackPolicy = DateFallbackPolicy.DROP

    monthly_bucket_threshold_days: int = Field(60, ge=0)
    month_abbreviations: List[str] = INDONESIAN_MONTHS
    blank_category_label: str = 'Umum'

    column_aliases: Dict[str, List[str]] = DEFAULT_COLUMN_ALIASES
    column_match_threshold: float = Field(90.0, ge=0, le=100)

    @field_validator('cogs_category_names', 'capex_category_names',
                     'opex_category_allowlist', 'offline_channel_matchers')
    @classmethod
    def normalize_names(cls, v):
        return {normalize_label(name) for name in v if str(name).strip()}

    @field_validator('month_abbreviations')
    @classmethod
    def twelve_months(cls, v):
        if len(v) != 12:
            raise ValueError(f'Expected 12 month abbreviations, got {len(v)}')
        return v

    @field_validator('column_aliases')
    @classmethod
    def complete_aliases(cls, v):
        """Fill fields the override leaves out from the defaults."""
        merged = dict(DEFAULT_COLUMN_ALIASES)
        merged.update(v)
        return merged

    def encodings_for(self, kind: LedgerKind) -> List[str]:
        return self.ledger_date_encodings.get(kind) or self.date_encodings


def load_config(path: Union[str, Path, None] = None) -> EngineConfig:
    """
    Load engine configuration from a JSON file.

    Args:
        path: JSON file with any subset of EngineConfig fields, or None
            for the built-in defaults

    Returns:
        Validated EngineConfig
    """
    if path is None:
        return EngineConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    config = EngineConfig.model_validate(data)
    logger.info(f"Loaded engine config from {path}")
    return config
