"""
XLSX source adapter for spreadsheet payroll exports.

Supports flexible layout:
  - sheet by index (0-based) or name
  - header row by index or auto-detect (scans the first rows for payroll-like column names)
  - skip_rows before header
  - normalizes headers the way the CSV adapter does (strip, lower, spaces -> underscores)

Cell values: floats become Decimal through their shortest repr so a salary typed
as 7250.5 arrives as Decimal("7250.5"); integral floats become int; text is stripped.
"""

from __future__ import annotations

import re
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

import openpyxl

# Payroll-like column keywords; a row with >= 2 matches is a header candidate
_HEADER_KEYWORDS = frozenset({
    "employee", "employee number", "employee no", "emp no", "staff number",
    "name", "full name", "employee name", "first name", "last name",
    "net salary", "net pay", "net amount", "amount", "salary",
    "national id", "iqama", "iqama number", "id number",
    "bank account", "account number", "iban",
})


def _normalize_header(value: Any) -> str:
    if value is None:
        return ""
    s = re.sub(r"\s+", " ", str(value)).strip().lower()
    return s.replace(" ", "_")


def _cell_value(cell: Any) -> Any:
    v = getattr(cell, "value", None)
    if v is None:
        return ""
    if isinstance(v, bool):
        return v
    if isinstance(v, float):
        if v == int(v):
            return int(v)
        return Decimal(repr(v))
    if isinstance(v, str):
        return v.strip()
    return v


def _header_score(row: Any) -> int:
    words = {
        str(_cell_value(c)).strip().lower().replace("_", " ")
        for c in row
        if _cell_value(c) != ""
    }
    return len(words & _HEADER_KEYWORDS)


def _detect_header_row(rows: list, max_search: int = 15, min_keywords: int = 2) -> int:
    """0-based index of the first row that looks like a payroll header."""
    for i, row in enumerate(rows[:max_search]):
        if _header_score(row) >= min_keywords:
            return i
    return 0


def _select_sheet(wb: Any, ref: int | str | None) -> Any:
    if ref is None:
        return wb.active
    try:
        return wb.worksheets[ref] if isinstance(ref, int) else wb[ref]
    except (IndexError, KeyError):
        raise ValueError(f"Sheet {ref!r} not found; workbook has {wb.sheetnames}")


class XlsxSourceAdapter:
    """
    Read .xlsx files as one dict per row.

    source_options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: rows to skip at the top of the sheet. Default: 0.
      header_row: 0-based row index (after skip_rows) to use as header. When omitted
        the first row with at least 2 payroll-like column names is used, else row 0.
    """

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            sheet = _select_sheet(wb, options.get("sheet"))
            skip_rows = int(options.get("skip_rows", 0))
            rows = list(sheet.iter_rows(min_row=1 + skip_rows))
            if not rows:
                return

            header_row = options.get("header_row")
            hi = int(header_row) if header_row is not None else _detect_header_row(rows)

            headers: list[str] = []
            for c, cell in enumerate(rows[hi]):
                key = _normalize_header(_cell_value(cell)) or f"column_{c + 1}"
                base, n = key, 0
                while key in headers:
                    n += 1
                    key = f"{base}_{n}"
                headers.append(key)

            for row in rows[hi + 1:]:
                values = [_cell_value(cell) for cell in row][: len(headers)]
                if not any(v != "" for v in values):
                    continue
                yield dict(zip(headers, values))
        finally:
            wb.close()
