#!/usr/bin/env python3
"""Command line interface for chunked bank statement income analysis."""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Dict, List

from reconciler.constants import DEFAULT_CHUNK_DELAY_SECONDS, MAX_PAGES_PER_CHUNK, SUFFIX_MEDIA_TYPES
from reconciler.exceptions import ReconcilerError
from reconciler.export import report_to_dict, write_report_workbook
from reconciler.llm_extractor import OpenAIStatementExtractor
from reconciler.logging_config import configure_logging
from reconciler.models import AnalysisOutcome, AnalysisResult, Document
from reconciler.pipeline import Extractor, StatementAnalyzer
from reconciler.splitter import PageSplitter


def default_delay() -> float:
    raw = os.getenv("STATEMENT_CHUNK_DELAY")
    if not raw:
        return DEFAULT_CHUNK_DELAY_SECONDS
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_CHUNK_DELAY_SECONDS


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract and reconcile income transactions from bank statement PDFs or images.",
    )
    parser.add_argument("inputs", nargs="+", help="Statement files (PDF, JPEG, PNG) or directories containing them")
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Send each document in a single call without splitting it into page chunks",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=MAX_PAGES_PER_CHUNK,
        help=f"Maximum pages per chunk (default: {MAX_PAGES_PER_CHUNK})",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait between chunk submissions (default: STATEMENT_CHUNK_DELAY or 90)",
    )
    parser.add_argument("--model", default=None, help="Extraction model (overrides OPENAI_EXTRACTION_MODEL)")
    parser.add_argument("--output-dir", dest="output_dir", help="Directory where per-file reports are written")
    parser.add_argument(
        "--excel",
        action="store_true",
        help="Also write an Excel workbook per file (requires --output-dir)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def resolve_input_paths(inputs: List[str]) -> List[Path]:
    paths: List[Path] = []
    for raw in inputs:
        path = Path(raw)
        if path.is_dir():
            found = sorted(
                candidate
                for candidate in path.rglob("*")
                if candidate.is_file() and candidate.suffix.lower() in SUFFIX_MEDIA_TYPES
            )
            if not found:
                raise ReconcilerError(f"No statement files found in directory: {path}")
            paths.extend(found)
        elif path.is_file():
            paths.append(path)
        else:
            raise ReconcilerError(f"Input file not found: {path}")
    return paths


def build_extractor(args: argparse.Namespace) -> Extractor:
    return OpenAIStatementExtractor(model=args.model)


def combined_totals(results: List[AnalysisResult]) -> Dict[str, object]:
    total_income = 0.0
    total_transactions = 0
    for result in results:
        for month in result.months:
            total_income += month.total
            total_transactions += len(month.transactions)
    return {"totalIncome": round(total_income, 2), "totalTransactions": total_transactions}


def write_outputs(path: Path, result: AnalysisResult, output_dir: Path, excel: bool) -> List[str]:
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"{path.stem}.report.json"
    with open(json_path, "w", encoding="utf-8") as handle:
        json.dump(report_to_dict(result), handle, indent=2, ensure_ascii=False)
    written = [str(json_path)]
    if excel:
        xlsx_path = output_dir / f"{path.stem}.report.xlsx"
        write_report_workbook(result, xlsx_path)
        written.append(str(xlsx_path))
    return written


def summarize(path: Path, outcome: AnalysisOutcome, result: AnalysisResult) -> Dict[str, object]:
    return {
        "file": str(path),
        "chunksProcessed": outcome.chunks_processed,
        "accountNumber": result.account_number,
        "totalIncome": round(result.total_income, 2),
        "totalTransactions": result.total_transactions,
        "months": [month.month for month in result.months],
    }


def main(argv: List[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if args.excel and not args.output_dir:
        parser.error("--excel requires --output-dir.")
    if args.max_pages < 1:
        parser.error("--max-pages must be at least 1.")
    delay = default_delay() if args.delay is None else args.delay
    if delay < 0:
        parser.error("--delay must not be negative.")

    configure_logging(args.log_level)

    try:
        input_paths = resolve_input_paths(args.inputs)
        extractor = build_extractor(args)
    except ReconcilerError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 1

    analyzer = StatementAnalyzer(
        extractor,
        splitter=PageSplitter(max_pages=args.max_pages),
        delay=delay,
    )
    output_dir = Path(args.output_dir) if args.output_dir else None

    outputs: List[Dict[str, object]] = []
    errors: List[Dict[str, object]] = []
    reports: List[AnalysisResult] = []

    for path in input_paths:
        try:
            document = Document.from_path(path)
        except OSError as exc:
            errors.append({"file": str(path), "error": f"Could not read file: {exc}", "chunksProcessed": 0})
            continue
        outcome = analyzer.analyze(document) if args.direct else analyzer.analyze_chunked(document)
        result = outcome.result
        if not outcome.success or result is None:
            errors.append(
                {"file": str(path), "error": outcome.error, "chunksProcessed": outcome.chunks_processed}
            )
            continue
        entry = summarize(path, outcome, result)
        if output_dir is not None:
            entry["outputs"] = write_outputs(path, result, output_dir, args.excel)
        outputs.append(entry)
        reports.append(result)

    payload: Dict[str, object] = {"results": outputs, "combined": combined_totals(reports)}
    usage_totals = getattr(extractor, "usage_totals", None)
    if callable(usage_totals):
        payload["usage"] = usage_totals()
    if errors:
        payload["errors"] = errors
    print(json.dumps(payload, indent=2))
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
