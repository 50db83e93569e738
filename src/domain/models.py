from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


class TransactionType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class Transaction:
    """One transaction record, stored exactly as the caller built it."""

    id: str
    date: date
    amount: Decimal
    type: str
    description: str
    merchant: str
    card_type: str

    def to_dict(self) -> dict[str, Any]:
        posted_on = self.date.isoformat() if isinstance(self.date, date) else self.date
        amount = float(self.amount) if isinstance(self.amount, Decimal) else self.amount
        txn_type = self.type.value if isinstance(self.type, TransactionType) else self.type
        return {
            "transaction_id": self.id,
            "transaction_date": posted_on,
            "transaction_amount": amount,
            "transaction_type": txn_type,
            "transaction_description": self.description,
            "merchant_name": self.merchant,
            "card_type": self.card_type,
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict())
