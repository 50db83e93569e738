from __future__ import annotations

import logging
from calendar import month_name
from collections import Counter
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Literal

from domain.errors import EmptyCollectionError, MalformedRecordError
from domain.models import Transaction, TransactionType
from domain.schemas import DateParts

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, (float, str)):
        text = str(value).strip()
        # Decimal() also accepts "1_000" digit grouping.
        if "_" in text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _to_bound(value: Any) -> Decimal | None:
    # Range bounds may be open-ended (+/- infinity) but never NaN.
    if isinstance(value, float) and value in (float("inf"), float("-inf")):
        return Decimal(value)
    return _to_decimal(value)


def _to_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def _type_of(txn: Transaction) -> str:
    return txn.type.value if isinstance(txn.type, TransactionType) else txn.type


class TransactionAnalyzer:
    """
    Query and aggregation helpers over an in-memory list of transactions.

    Every query is a single pass over the current list; only add_transaction mutates it.
    Amounts and dates are read through _amount_of/_date_of so that a record with an
    uncoercible value fails every query that touches it with MalformedRecordError.
    """

    def __init__(self, transactions: Iterable[Transaction] | None = None) -> None:
        self._transactions: list[Transaction] = list(transactions or [])
        logger.debug("TransactionAnalyzer created count=%d", len(self._transactions))

    def __len__(self) -> int:
        return len(self._transactions)

    # ---- coercion ----
    def _amount_of(self, txn: Transaction) -> Decimal:
        amount = _to_decimal(txn.amount)
        if amount is None:
            raise MalformedRecordError(txn.id, f"amount is not numeric: {txn.amount!r}")
        return amount

    def _date_of(self, txn: Transaction) -> date:
        posted_on = _to_date(txn.date)
        if posted_on is None:
            raise MalformedRecordError(txn.id, f"date is not YYYY-MM-DD: {txn.date!r}")
        return posted_on

    def _parse_date_arg(self, value: date | str, label: str) -> date:
        parsed = _to_date(value)
        if parsed is None:
            raise ValueError(f"{label} must be a date or YYYY-MM-DD string, got {value!r}")
        return parsed

    def _sum(self, transactions: Iterable[Transaction]) -> Decimal:
        return sum((self._amount_of(txn) for txn in transactions), _ZERO)

    # ---- collection ----
    def add_transaction(self, transaction: Transaction) -> None:
        self._transactions.append(transaction)
        logger.debug("TransactionAnalyzer added id=%s count=%d", transaction.id, len(self._transactions))

    def get_all_transactions(self) -> list[Transaction]:
        return self._transactions

    def get_unique_transaction_types(self) -> list[str]:
        seen: dict[str, None] = {}
        for txn in self._transactions:
            seen.setdefault(_type_of(txn), None)
        return list(seen)

    # ---- totals ----
    def calculate_total_amount(self) -> Decimal:
        return self._sum(self._transactions)

    def calculate_total_amount_by_date(
        self,
        year: int | None = None,
        month: int | None = None,
        day: int | None = None,
    ) -> Decimal:
        """Sum amounts whose date matches every given component; month is 1-12."""
        parts = DateParts(year=year, month=month, day=day)

        def matches(txn: Transaction) -> bool:
            posted_on = self._date_of(txn)
            return (
                (parts.year is None or posted_on.year == parts.year)
                and (parts.month is None or posted_on.month == parts.month)
                and (parts.day is None or posted_on.day == parts.day)
            )

        return self._sum(txn for txn in self._transactions if matches(txn))

    def calculate_average_transaction_amount(self) -> Decimal:
        if not self._transactions:
            raise EmptyCollectionError("Cannot average an empty transaction collection")
        return self.calculate_total_amount() / Decimal(len(self._transactions))

    def calculate_total_debit_amount(self) -> Decimal:
        return self._sum(self.get_transactions_by_type(TransactionType.DEBIT.value))

    # ---- filters ----
    def get_transactions_by_type(self, txn_type: str) -> list[Transaction]:
        return [txn for txn in self._transactions if _type_of(txn) == txn_type]

    def get_transactions_in_date_range(self, start: date | str, end: date | str) -> list[Transaction]:
        start_on = self._parse_date_arg(start, "start")
        end_on = self._parse_date_arg(end, "end")
        # Reversed bounds match nothing, but every record date is still checked.
        return [txn for txn in self._transactions if start_on <= self._date_of(txn) <= end_on]

    def get_transactions_by_merchant(self, merchant: str) -> list[Transaction]:
        return [txn for txn in self._transactions if txn.merchant == merchant]

    def get_transactions_by_amount_range(self, min_amount: Any, max_amount: Any) -> list[Transaction]:
        low = _to_bound(min_amount)
        high = _to_bound(max_amount)
        if low is None or high is None:
            raise ValueError(f"Amount bounds must be numbers, got {min_amount!r}..{max_amount!r}")
        return [txn for txn in self._transactions if low <= self._amount_of(txn) <= high]

    def get_transactions_before_date(self, cutoff: date | str) -> list[Transaction]:
        cutoff_on = self._parse_date_arg(cutoff, "cutoff")
        return [txn for txn in self._transactions if self._date_of(txn) < cutoff_on]

    # ---- frequency ----
    def _busiest_month(self, transactions: list[Transaction], label: str) -> str:
        counts = Counter(self._date_of(txn).month for txn in transactions)
        if not counts:
            raise EmptyCollectionError(f"No {label} to group by month")
        # Ties go to the earliest calendar month.
        busiest = max(sorted(counts), key=lambda month: counts[month])
        logger.debug("Busiest month label=%s month=%d count=%d", label, busiest, counts[busiest])
        return month_name[busiest]

    def find_most_transactions_month(self) -> str:
        return self._busiest_month(self._transactions, "transactions")

    def find_most_debit_transaction_month(self) -> str:
        return self._busiest_month(self.get_transactions_by_type(TransactionType.DEBIT.value), "debit transactions")

    def most_transaction_types(self) -> Literal["debit", "credit", "equal"]:
        debit_count = len(self.get_transactions_by_type(TransactionType.DEBIT.value))
        credit_count = len(self.get_transactions_by_type(TransactionType.CREDIT.value))
        if debit_count > credit_count:
            return "debit"
        if debit_count < credit_count:
            return "credit"
        return "equal"

    # ---- lookups ----
    def find_transaction_by_id(self, transaction_id: str) -> Transaction | None:
        return next((txn for txn in self._transactions if txn.id == transaction_id), None)

    def map_transaction_descriptions(self) -> list[str]:
        return [txn.description for txn in self._transactions]
