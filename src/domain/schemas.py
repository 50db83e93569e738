from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.models import Transaction


class TransactionRecord(BaseModel):
    """
    One element of the input JSON array.

    Keys match the file format:
      - transaction_id, transaction_date (YYYY-MM-DD), transaction_amount (number or numeric string)
      - transaction_type, transaction_description, merchant_name, card_type
    """

    transaction_id: str
    transaction_date: date = Field(description="Posting date in YYYY-MM-DD format, e.g. 2019-01-31.")
    transaction_amount: Decimal
    transaction_type: str
    transaction_description: str = ""
    merchant_name: str = ""
    card_type: str = ""

    @field_validator("transaction_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        # Some exports write numeric ids.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("transaction_date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return datetime.strptime(value.strip(), "%Y-%m-%d").date()
            except ValueError:
                pass
        raise ValueError(f"transaction_date must be YYYY-MM-DD, got {value!r}")

    @field_validator("transaction_amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("transaction_amount must be numeric, got a boolean")
        if isinstance(value, float):
            value = str(value)
        if isinstance(value, str):
            text = value.strip()
            if not text:
                raise ValueError("transaction_amount is blank")
            if "_" in text:
                raise ValueError(f"transaction_amount is not numeric: {text!r}")
            try:
                value = Decimal(text)
            except InvalidOperation as exc:
                raise ValueError(f"transaction_amount is not numeric: {text!r}") from exc
        if isinstance(value, Decimal) and not value.is_finite():
            raise ValueError("transaction_amount must be finite")
        return value

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.transaction_id,
            date=self.transaction_date,
            amount=self.transaction_amount,
            type=self.transaction_type,
            description=self.transaction_description,
            merchant=self.merchant_name,
            card_type=self.card_type,
        )


class DateParts(BaseModel):
    year: Optional[int] = None
    month: Optional[int] = Field(default=None, ge=1, le=12, description="Calendar month, 1=Jan ... 12=Dec.")
    day: Optional[int] = Field(default=None, ge=1, le=31)


class QueryResult(BaseModel):
    name: str
    ok: bool = True
    value: Any = None
    errors: List[str] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    schema_version: str = Field(default="ledgerlens.report.v1", alias="schema")
    source: str
    transaction_count: int
    results: List[QueryResult] = Field(default_factory=list)

    def get(self, name: str) -> QueryResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(f"Query not in report: {name}")
