from __future__ import annotations


class TransactionAnalysisError(RuntimeError):
    pass


class TransactionLoadError(TransactionAnalysisError):
    pass


class EmptyCollectionError(TransactionAnalysisError):
    pass


class MalformedRecordError(TransactionAnalysisError):
    def __init__(self, transaction_id: str, message: str) -> None:
        super().__init__(f"Transaction {transaction_id!r}: {message}")
        self.transaction_id = transaction_id
