"""Source adapters for payroll exports (file I/O only, no DB)."""

from wps_ingestion.adapters.base import SourceAdapter, adapter_for
from wps_ingestion.adapters.csv_adapter import CsvSourceAdapter
from wps_ingestion.adapters.json_adapter import JsonSourceAdapter
from wps_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "CsvSourceAdapter",
    "JsonSourceAdapter",
    "XlsxSourceAdapter",
    "adapter_for",
]
