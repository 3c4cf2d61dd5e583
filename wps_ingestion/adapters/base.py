"""
Source adapter protocol.

Contract:
    SourceAdapter.read() yields one dict per source record (streaming).

Architecture: wps_ingestion/adapters. File I/O only, no DB or kernel imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading structured source files into record dicts."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one dict per source record. Streams; does not load entire file."""
        ...


def adapter_for(source_path: Path) -> SourceAdapter:
    """Pick an adapter from the file suffix (.csv, .txt, .json, .jsonl, .xlsx)."""
    from wps_ingestion.adapters.csv_adapter import CsvSourceAdapter
    from wps_ingestion.adapters.json_adapter import JsonSourceAdapter
    from wps_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

    suffix = Path(source_path).suffix.lower()
    if suffix in (".csv", ".txt"):
        return CsvSourceAdapter()
    if suffix in (".json", ".jsonl"):
        return JsonSourceAdapter()
    if suffix in (".xlsx", ".xlsm"):
        return XlsxSourceAdapter()
    raise ValueError(f"Unsupported payroll export type: '{suffix}'")
