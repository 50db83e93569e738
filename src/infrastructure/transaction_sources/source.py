from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from application.analyzer import TransactionAnalyzer
from domain.models import Transaction

logger = logging.getLogger(__name__)


class TransactionSource(ABC):
    """Base contract for anything that can produce the initial transaction list."""

    name: str = "source"

    @abstractmethod
    def fetch_transactions(self) -> list[Transaction]:
        raise NotImplementedError


def load_analyzer(source: TransactionSource) -> TransactionAnalyzer:
    transactions = source.fetch_transactions()
    logger.info("Loaded analyzer source=%s count=%d", source.name, len(transactions))
    return TransactionAnalyzer(transactions)
