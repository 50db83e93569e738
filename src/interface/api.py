from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from application.analyzer import TransactionAnalyzer
from application.report import ReportBuilder
from domain.errors import EmptyCollectionError, MalformedRecordError, TransactionLoadError
from domain.schemas import AnalysisReport
from infrastructure.transaction_sources.json_source import JsonFileTransactionSource
from infrastructure.transaction_sources.source import load_analyzer

logger = logging.getLogger(__name__)

app = FastAPI(title="LedgerLens API")


@lru_cache(maxsize=1)
def _source() -> JsonFileTransactionSource:
    return JsonFileTransactionSource()


@lru_cache(maxsize=1)
def _loaded_analyzer() -> TransactionAnalyzer:
    return load_analyzer(_source())


def get_analyzer() -> TransactionAnalyzer:
    try:
        return _loaded_analyzer()
    except TransactionLoadError as exc:
        logger.error("Transaction load failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@app.exception_handler(EmptyCollectionError)
@app.exception_handler(MalformedRecordError)
async def _analysis_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/report")
def report(analyzer: TransactionAnalyzer = Depends(get_analyzer)) -> dict:
    result: AnalysisReport = ReportBuilder(analyzer).build(source=str(_source().path))
    return result.model_dump(by_alias=True)


@app.get("/transactions")
def list_transactions(
    txn_type: Optional[str] = Query(default=None, alias="type"),
    merchant: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    analyzer: TransactionAnalyzer = Depends(get_analyzer),
) -> list[dict[str, Any]]:
    try:
        selected = analyzer.get_all_transactions()
        if txn_type is not None:
            selected = analyzer.get_transactions_by_type(txn_type)
        if merchant is not None:
            selected = [t for t in selected if t.merchant == merchant]
        if start is not None or end is not None:
            in_range = analyzer.get_transactions_in_date_range(start or "0001-01-01", end or "9999-12-31")
            kept = {id(t) for t in in_range}
            selected = [t for t in selected if id(t) in kept]
        if min_amount is not None or max_amount is not None:
            low = min_amount if min_amount is not None else float("-inf")
            high = max_amount if max_amount is not None else float("inf")
            in_range = analyzer.get_transactions_by_amount_range(low, high)
            kept = {id(t) for t in in_range}
            selected = [t for t in selected if id(t) in kept]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [t.to_dict() for t in selected]


@app.get("/transactions/{transaction_id}")
def get_transaction(transaction_id: str, analyzer: TransactionAnalyzer = Depends(get_analyzer)) -> dict[str, Any]:
    transaction = analyzer.find_transaction_by_id(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail=f"Transaction not found: {transaction_id}")
    return transaction.to_dict()
