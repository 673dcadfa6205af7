import logging
from typing import Dict, List, Optional, Set, Tuple

from config import EngineConfig, normalize_label
from schema import CategoryBucket, ReportView, SalesChannel

logger = logging.getLogger(__name__)


class ExpenseCategorizer:
    """Resolves free-text expense categories to an accounting bucket.

    Category names are looked up in the configured rule tables; nothing
    here branches on the content of a particular category string. The
    tables may overlap, so the lookup order depends on the report view:
    profit and loss checks COGS before CAPEX, cash flow checks CAPEX first.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or EngineConfig()

        tables = {
            CategoryBucket.COGS: self.config.cogs_category_names,
            CategoryBucket.CAPEX: self.config.capex_category_names,
            CategoryBucket.OPEX: self.config.opex_category_allowlist,
        }
        precedence = {
            ReportView.PROFIT_AND_LOSS: [CategoryBucket.COGS, CategoryBucket.CAPEX, CategoryBucket.OPEX],
            ReportView.CASH_FLOW: [CategoryBucket.CAPEX, CategoryBucket.COGS, CategoryBucket.OPEX],
        }
        self.rules: Dict[ReportView, List[Tuple[CategoryBucket, Set[str]]]] = {
            view: [(bucket, tables[bucket]) for bucket in order]
            for view, order in precedence.items()
        }
        self._unknown_seen: Set[str] = set()

    def classify(self, category: str, view: ReportView = ReportView.PROFIT_AND_LOSS) -> CategoryBucket:
        """
        Classify an expense category.

        Args:
            category: Operator-entered category text
            view: Statement the classification is for

        Returns:
            Exactly one CategoryBucket; unknown names get the default bucket
        """
        key = normalize_label(category or '')

        for bucket, names in self.rules[view]:
            if key in names:
                return bucket

        if key not in self._unknown_seen:
            self._unknown_seen.add(key)
            self.logger.debug(
                f"Unrecognized expense category {category!r}, "
                f"using {self.config.default_expense_bucket.value}"
            )
        return self.config.default_expense_bucket

    def is_capex(self, category: str) -> bool:
        return self.classify(category, ReportView.CASH_FLOW) == CategoryBucket.CAPEX


class ChannelCategorizer:
    """Splits revenue into offline (shop counter) and online sales."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.matchers = sorted(self.config.offline_channel_matchers)

    def classify(self, channel: str) -> SalesChannel:
        text = normalize_label(channel or '')
        if any(matcher in text for matcher in self.matchers):
            return SalesChannel.OFFLINE
        return SalesChannel.ONLINE
