from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from domain.errors import TransactionLoadError
from domain.models import Transaction
from domain.schemas import TransactionRecord
from infrastructure.transaction_sources.source import TransactionSource

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTIONS_FILE = "transactions.json"


class JsonFileTransactionSource(TransactionSource):
    """Reads a JSON array of transaction objects from disk."""

    name = "json_file"

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or os.getenv("TRANSACTIONS_FILE") or DEFAULT_TRANSACTIONS_FILE)

    def fetch_transactions(self) -> list[Transaction]:
        logger.info("JSON source reading path=%s", self.path)
        rows = self._read_rows()
        transactions = [self._normalize_row(index, row) for index, row in enumerate(rows)]
        logger.info("JSON source normalized transactions count=%d path=%s", len(transactions), self.path)
        return transactions

    def _read_rows(self) -> list[Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TransactionLoadError(f"Unable to read transactions file {self.path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise TransactionLoadError(f"Transactions file {self.path} is not valid UTF-8: {exc}") from exc

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TransactionLoadError(f"Transactions file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(payload, list):
            raise TransactionLoadError(
                f"Expected a JSON array of transactions in {self.path}, got {type(payload).__name__}"
            )
        return payload

    def _normalize_row(self, index: int, row: Any) -> Transaction:
        if not isinstance(row, dict):
            raise TransactionLoadError(
                f"Transaction #{index} in {self.path} must be an object, got {type(row).__name__}"
            )
        try:
            record = TransactionRecord.model_validate(row)
        except ValidationError as exc:
            raise TransactionLoadError(f"Transaction #{index} in {self.path} did not match TransactionRecord: {exc}") from exc
        return record.to_transaction()
