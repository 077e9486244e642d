# csv_parser_service/ingest/cli.py
"""
Extract CLI
Runs the same extractor as the HTTP/SQS paths over local CSV files.

Usage examples
--------------
# Employees CSV -> JSONL on stdout
python -m csv_parser_service.ingest.cli samples/employees.csv

# Previous assignments, written to a file
python -m csv_parser_service.ingest.cli --kind assignments samples/last_year.csv --out pairs.jsonl

Exit status is 2 when any input is malformed (nothing is written for it).
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterable
from pathlib import Path

from csv_parser_service.ingest.extract import extract
from csv_parser_service.models import RecordKind

# ---- IO helpers -------------------------------------------------------------


def _read_text(path: Path) -> str:
    # utf-8-sig: spreadsheet exports often carry a BOM
    return path.read_bytes().decode("utf-8-sig")


def _write_jsonl(rows: Iterable[dict[str, str]], out_path: Path | None) -> int:
    out_f = sys.stdout if out_path is None else out_path.open("w", encoding="utf-8")
    close = out_f is not sys.stdout
    n = 0
    try:
        for r in rows:
            out_f.write(json.dumps(r, ensure_ascii=False) + "\n")
            n += 1
    finally:
        if close:
            out_f.close()
    return n


# ---- CLI --------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Extract employee or previous-assignment records from CSV.")
    p.add_argument("inputs", nargs="+", help="Input CSV files")
    p.add_argument(
        "--kind",
        choices=[k.value for k in RecordKind],
        default=RecordKind.EMPLOYEES.value,
        help="Record type to extract (default: employees)",
    )
    p.add_argument(
        "--out",
        metavar="PATH",
        help="Write JSONL to PATH. Use '-' or omit to write to stdout.",
    )
    args = p.parse_args(argv)

    paths = [Path(s) for s in args.inputs]
    for pth in paths:
        if not pth.exists():
            raise SystemExit(f"Input not found: {pth}")

    records: list[dict[str, str]] = []
    failed = False
    for pth in paths:
        try:
            text = _read_text(pth)
        except UnicodeDecodeError as err:
            print(f"✘ {pth}: not valid UTF-8 ({err})", file=sys.stderr)
            failed = True
            continue
        result = extract(args.kind, text)
        if not result.succeeded:
            print(f"✘ {pth}: {result.error}", file=sys.stderr)
            failed = True
            continue
        records.extend(result.dump_records())

    out_path = None if (args.out in (None, "-", "")) else Path(args.out)
    count = _write_jsonl(records, out_path)
    print(f"✔ Extracted {count} {args.kind} record(s).", file=sys.stderr)
    return 2 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
