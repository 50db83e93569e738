from __future__ import annotations

import json
import os
import tempfile
import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

from application.analyzer import TransactionAnalyzer
from domain.errors import TransactionLoadError
from domain.models import Transaction
from infrastructure.transaction_sources.json_source import JsonFileTransactionSource
from infrastructure.transaction_sources.source import TransactionSource, load_analyzer


class _FakeSource(TransactionSource):
    name = "fake"

    def __init__(self, transactions: list[Transaction]):
        self._transactions = transactions

    def fetch_transactions(self) -> list[Transaction]:
        return list(self._transactions)


class JsonFileTransactionSourceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.dir = Path(self._tmp.name)

    def _write(self, payload, name: str = "transactions.json") -> Path:
        path = self.dir / name
        text = payload if isinstance(payload, str) else json.dumps(payload)
        path.write_text(text, encoding="utf-8")
        return path

    def _row(self, **overrides) -> dict:
        row = {
            "transaction_id": "1",
            "transaction_date": "2019-01-01",
            "transaction_amount": "100",
            "transaction_type": "debit",
            "transaction_description": "Groceries",
            "merchant_name": "SuperMart",
            "card_type": "Visa",
        }
        row.update(overrides)
        return row

    def test_loads_rows_in_file_order(self) -> None:
        path = self._write([self._row(), self._row(transaction_id="2", transaction_amount=50, transaction_type="credit")])

        transactions = JsonFileTransactionSource(path).fetch_transactions()

        self.assertEqual([t.id for t in transactions], ["1", "2"])
        self.assertEqual(transactions[0].date, date(2019, 1, 1))
        self.assertEqual(transactions[0].amount, Decimal("100"))
        self.assertEqual(transactions[1].amount, Decimal("50"))
        self.assertEqual(transactions[1].type, "credit")

    def test_path_defaults_to_env_var(self) -> None:
        path = self._write([self._row()], name="from_env.json")
        with patch.dict(os.environ, {"TRANSACTIONS_FILE": str(path)}):
            source = JsonFileTransactionSource()
        self.assertEqual(source.path, path)
        self.assertEqual(len(source.fetch_transactions()), 1)

    def test_missing_file_raises_load_error(self) -> None:
        source = JsonFileTransactionSource(self.dir / "nope.json")
        with self.assertRaises(TransactionLoadError) as ctx:
            source.fetch_transactions()
        self.assertIn("nope.json", str(ctx.exception))

    def test_invalid_json_raises_load_error(self) -> None:
        path = self._write("[{not json")
        with self.assertRaises(TransactionLoadError):
            JsonFileTransactionSource(path).fetch_transactions()

    def test_top_level_object_raises_load_error(self) -> None:
        path = self._write({"transactions": []})
        with self.assertRaises(TransactionLoadError) as ctx:
            JsonFileTransactionSource(path).fetch_transactions()
        self.assertIn("JSON array", str(ctx.exception))

    def test_non_object_element_raises_load_error(self) -> None:
        path = self._write([self._row(), "oops"])
        with self.assertRaises(TransactionLoadError) as ctx:
            JsonFileTransactionSource(path).fetch_transactions()
        self.assertIn("#1", str(ctx.exception))

    def test_bad_amount_raises_load_error_with_index(self) -> None:
        path = self._write([self._row(), self._row(transaction_id="2", transaction_amount="ten")])
        with self.assertRaises(TransactionLoadError) as ctx:
            JsonFileTransactionSource(path).fetch_transactions()
        self.assertIn("#1", str(ctx.exception))

    def test_bad_date_raises_load_error(self) -> None:
        path = self._write([self._row(transaction_date="2019/13/45")])
        with self.assertRaises(TransactionLoadError):
            JsonFileTransactionSource(path).fetch_transactions()

    def test_invalid_utf8_raises_load_error(self) -> None:
        path = self.dir / "latin1.json"
        path.write_bytes(b'[{"transaction_id": "\xff"}]')
        with self.assertRaises(TransactionLoadError) as ctx:
            JsonFileTransactionSource(path).fetch_transactions()
        self.assertIn("UTF-8", str(ctx.exception))

    def test_empty_array_is_valid(self) -> None:
        path = self._write([])
        self.assertEqual(JsonFileTransactionSource(path).fetch_transactions(), [])


class LoadAnalyzerTests(unittest.TestCase):
    def test_builds_analyzer_from_source(self) -> None:
        txn = Transaction(
            id="1",
            date=date(2019, 1, 1),
            amount=Decimal("10"),
            type="debit",
            description="Coffee",
            merchant="Cafe",
            card_type="Visa",
        )

        analyzer = load_analyzer(_FakeSource([txn]))

        self.assertIsInstance(analyzer, TransactionAnalyzer)
        self.assertEqual(analyzer.get_all_transactions(), [txn])


if __name__ == "__main__":
    unittest.main()
