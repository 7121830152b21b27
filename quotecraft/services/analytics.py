import logging
import threading
from collections import Counter
from decimal import Decimal

from quotecraft.core.config import settings
from quotecraft.core.metrics import analytics_ring_size
from quotecraft.schemas.quote import AnalyticsSummary, QuoteSummary
from quotecraft.services.calculator import round_money

logger = logging.getLogger(__name__)


class AnalyticsRing:
    """Bounded log of quote summaries.

    Once an append pushes the length past `capacity`, only the newest
    `retain` entries are kept. Entries are not evicted one at a time.
    """

    def __init__(self, capacity: int = settings.ANALYTICS_CAPACITY, retain: int = settings.ANALYTICS_RETAIN):
        if not 0 < retain <= capacity:
            raise ValueError("retain must be between 1 and capacity")
        self.capacity = capacity
        self.retain = retain
        self._entries: list[QuoteSummary] = []
        self._lock = threading.Lock()

    def record(self, summary: QuoteSummary) -> None:
        with self._lock:
            self._entries.append(summary)
            if len(self._entries) > self.capacity:
                dropped = len(self._entries) - self.retain
                self._entries = self._entries[-self.retain:]
                logger.info(f"Analytics ring trimmed: {dropped} oldest entries dropped")
            analytics_ring_size.set(len(self._entries))

    def snapshot(self) -> list[QuoteSummary]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def summary(self) -> AnalyticsSummary:
        entries = self.snapshot()
        if not entries:
            return AnalyticsSummary()

        total_value = sum((entry.total_price for entry in entries), Decimal("0"))
        return AnalyticsSummary(
            total_quotes=len(entries),
            average_quote=round_money(total_value / len(entries)),
            total_value=round_money(total_value),
            event_type_breakdown=dict(Counter(entry.event_type for entry in entries)),
            service_level_breakdown=dict(Counter(entry.service_level for entry in entries)),
        )
