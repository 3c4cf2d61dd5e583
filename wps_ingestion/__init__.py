"""Payroll export ingestion: file adapters and line-item mapping (no DB)."""

from wps_ingestion.line_items import load_line_items, row_to_line_item, rows_to_line_items

__all__ = ["load_line_items", "row_to_line_item", "rows_to_line_items"]
