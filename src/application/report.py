from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Any, Callable

from application.analyzer import TransactionAnalyzer
from domain.errors import TransactionAnalysisError
from domain.models import Transaction
from domain.schemas import AnalysisReport, QueryResult

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Transaction):
        return value.to_dict()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


class ReportBuilder:
    """Runs the standard set of analyzer queries and collects their results."""

    def __init__(self, analyzer: TransactionAnalyzer):
        self._analyzer = analyzer

    def queries(self) -> list[tuple[str, Callable[[], Any]]]:
        a = self._analyzer
        return [
            ("unique_transaction_types", a.get_unique_transaction_types),
            ("total_amount", a.calculate_total_amount),
            ("total_amount_by_date_2019_01_01", lambda: a.calculate_total_amount_by_date(2019, 1, 1)),
            ("transactions_by_type_debit", lambda: a.get_transactions_by_type("debit")),
            ("transactions_in_date_range", lambda: a.get_transactions_in_date_range("2019-01-01", "2019-01-10")),
            ("transactions_by_merchant_supermart", lambda: a.get_transactions_by_merchant("SuperMart")),
            ("average_transaction_amount", a.calculate_average_transaction_amount),
            ("transactions_by_amount_range", lambda: a.get_transactions_by_amount_range(50, 150)),
            ("total_debit_amount", a.calculate_total_debit_amount),
            ("most_transactions_month", a.find_most_transactions_month),
            ("most_debit_transactions_month", a.find_most_debit_transaction_month),
            ("most_transaction_types", a.most_transaction_types),
            ("transactions_before_2019_01_05", lambda: a.get_transactions_before_date("2019-01-05")),
            ("transaction_id_1", lambda: a.find_transaction_by_id("1")),
            ("transaction_descriptions", a.map_transaction_descriptions),
        ]

    def build(self, source: str) -> AnalysisReport:
        results: list[QueryResult] = []
        for name, query in self.queries():
            t = time.perf_counter()
            try:
                result = QueryResult(name=name, value=_jsonable(query()))
            except (TransactionAnalysisError, ValueError) as exc:
                logger.warning("Report query failed name=%s error=%s", name, exc)
                result = QueryResult(name=name, ok=False, errors=[str(exc) or exc.__class__.__name__])
            results.append(result)
            logger.debug("Report query finished name=%s in %.4fs ok=%s", name, time.perf_counter() - t, result.ok)

        return AnalysisReport(source=source, transaction_count=len(self._analyzer), results=results)
