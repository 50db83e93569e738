from __future__ import annotations

import sys

from application.report import ReportBuilder
from domain.errors import TransactionLoadError
from infrastructure.transaction_sources.json_source import JsonFileTransactionSource
from infrastructure.transaction_sources.source import load_analyzer


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 1:
        print("Usage: python main.py [path/to/transactions.json]", file=sys.stderr)
        return 2

    source = JsonFileTransactionSource(args[0] if args else None)
    try:
        analyzer = load_analyzer(source)
    except TransactionLoadError as exc:
        print(f"[ledgerlens] error: {exc}", file=sys.stderr)
        return 1

    report = ReportBuilder(analyzer).build(source=str(source.path))
    print(report.model_dump_json(indent=2, by_alias=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
