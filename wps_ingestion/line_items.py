"""
Line-item mapping: raw payroll export rows to ``PayrollLineItem``.

Pure transformation apart from ``load_line_items``, which streams a file
through the adapter picked by its suffix.  Column names are matched after
the adapters lowercase them; common export aliases are accepted.

Failures raise ``InvalidLineItemError`` naming the 0-based row index and
the offending column, the same shape the encoder uses.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any
from uuid import UUID

from wps_ingestion.adapters.base import adapter_for
from wps_kernel.exceptions import InvalidLineItemError
from wps_kernel.logging_config import get_logger
from wps_modules.wage_file.helpers import coerce_amount
from wps_modules.wage_file.models import PayrollLineItem

logger = get_logger("ingestion.line_items")

# Canonical field -> accepted source columns, first match wins
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "employee_number": ("employee_number", "employee_no", "emp_no", "staff_number"),
    "employee_full_name": ("employee_full_name", "full_name", "employee_name", "name"),
    "net_salary": ("net_salary", "net_pay", "net_amount", "amount"),
    "national_id": ("national_id", "iqama_number", "iqama", "id_number"),
    "bank_account": ("bank_account", "account_number", "iban"),
    "employee_id": ("employee_id",),
}


def _pick(row: Mapping[str, Any], field: str) -> Any:
    for column in COLUMN_ALIASES[field]:
        value = row.get(column)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _full_name(row: Mapping[str, Any]) -> str | None:
    name = _text(_pick(row, "employee_full_name"))
    if name:
        return name
    parts = [_text(row.get("first_name")), _text(row.get("last_name"))]
    joined = " ".join(p for p in parts if p)
    return joined or None


def row_to_line_item(index: int, row: Mapping[str, Any]) -> PayrollLineItem:
    """Map one source row; ``index`` is 0-based and only used in errors."""
    employee_number = _text(_pick(row, "employee_number"))
    if employee_number is None:
        raise InvalidLineItemError(index, "employee_number", "missing")

    full_name = _full_name(row)
    if full_name is None:
        raise InvalidLineItemError(index, "employee_full_name", "missing")

    raw_amount = _pick(row, "net_salary")
    if raw_amount is None:
        raise InvalidLineItemError(index, "net_salary", "missing")
    try:
        net_salary = coerce_amount(raw_amount)
    except ValueError as exc:
        raise InvalidLineItemError(index, "net_salary", str(exc)) from exc

    employee_id = None
    raw_employee_id = _text(_pick(row, "employee_id"))
    if raw_employee_id is not None:
        try:
            employee_id = UUID(raw_employee_id)
        except ValueError as exc:
            raise InvalidLineItemError(
                index, "employee_id", f"'{raw_employee_id}' is not a UUID"
            ) from exc

    return PayrollLineItem(
        employee_number=employee_number,
        employee_full_name=full_name,
        net_salary=net_salary,
        national_id=_text(_pick(row, "national_id")),
        bank_account=_text(_pick(row, "bank_account")),
        employee_id=employee_id,
    )


def rows_to_line_items(rows: Iterable[Mapping[str, Any]]) -> list[PayrollLineItem]:
    return [row_to_line_item(index, row) for index, row in enumerate(rows)]


def load_line_items(
    source_path: Path | str,
    options: dict[str, Any] | None = None,
) -> list[PayrollLineItem]:
    """Read a CSV, JSON or XLSX payroll export into line items, in file order."""
    source_path = Path(source_path)
    adapter = adapter_for(source_path)
    items = rows_to_line_items(adapter.read(source_path, options or {}))
    logger.info(
        "payroll_export_loaded",
        extra={"source": str(source_path), "line_item_count": len(items)},
    )
    return items
