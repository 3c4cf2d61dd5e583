"""
CSV source adapter.

Uses csv.DictReader. Configurable: delimiter, encoding, skip_rows. Handles
BOM via utf-8-sig when encoding is utf-8 (spreadsheet exports often carry
one). Header names are stripped and lowercased so exported column captions
such as " Net Salary" and "net salary" map the same way. Streams rows.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _normalize_header(name: str | None) -> str:
    return (name or "").strip().lower().replace(" ", "_")


class CsvSourceAdapter:
    """Read CSV payroll exports as one dict per row."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        skip_rows = int(options.get("skip_rows", 0))

        with Path(source_path).open("r", encoding=encoding, newline="") as f:
            for _ in range(skip_rows):
                next(f, None)
            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                return
            reader.fieldnames = [_normalize_header(n) for n in reader.fieldnames]
            for row in reader:
                # Blank trailing lines in exports come through as all-empty rows
                if not any((v or "").strip() for k, v in row.items() if k is not None):
                    continue
                yield {k: v for k, v in row.items() if k}
