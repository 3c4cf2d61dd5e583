"""Tests for mapping payroll export rows to line items."""

from decimal import Decimal
from uuid import uuid4

import openpyxl
import pytest

from wps_ingestion import load_line_items, row_to_line_item, rows_to_line_items
from wps_kernel.exceptions import InvalidLineItemError


class TestRowToLineItem:

    def test_canonical_columns(self):
        employee_id = uuid4()
        item = row_to_line_item(0, {
            "employee_number": "EMP001",
            "employee_full_name": "Ahmed Al-Rashid",
            "net_salary": "5000.00",
            "national_id": "1012345678",
            "bank_account": "SA0380000000608010167519",
            "employee_id": str(employee_id),
        })

        assert item.employee_number == "EMP001"
        assert item.employee_full_name == "Ahmed Al-Rashid"
        assert item.net_salary == Decimal("5000.00")
        assert item.national_id == "1012345678"
        assert item.bank_account == "SA0380000000608010167519"
        assert item.employee_id == employee_id
        assert item.batch_id is None

    def test_aliases_and_split_name(self):
        item = row_to_line_item(0, {
            "emp_no": " EMP002 ",
            "first_name": "Fatima",
            "last_name": "Noor",
            "net_pay": "7,250.50",
            "iqama_number": "2098765432",
        })

        assert item.employee_number == "EMP002"
        assert item.employee_full_name == "Fatima Noor"
        assert item.net_salary == Decimal("7250.50")
        assert item.account_reference == "2098765432"

    def test_blank_optional_columns_become_none(self):
        item = row_to_line_item(0, {
            "employee_number": "EMP001",
            "employee_full_name": "Ahmed Al-Rashid",
            "net_salary": "5000",
            "bank_account": "  ",
            "national_id": "",
        })
        assert item.bank_account is None
        assert item.national_id is None

    def test_decimal_value_passes_through(self):
        item = row_to_line_item(0, {
            "employee_number": "EMP001",
            "employee_full_name": "Ahmed Al-Rashid",
            "net_salary": Decimal("7250.50"),
        })
        assert item.net_salary == Decimal("7250.50")

    @pytest.mark.parametrize(
        "row, field",
        [
            ({"employee_full_name": "A", "net_salary": "1"}, "employee_number"),
            ({"employee_number": "E1", "net_salary": "1"}, "employee_full_name"),
            ({"employee_number": "E1", "employee_full_name": "A"}, "net_salary"),
            ({"employee_number": "E1", "employee_full_name": "A", "net_salary": "abc"}, "net_salary"),
            ({"employee_number": "E1", "employee_full_name": "A", "net_salary": 1.5}, "net_salary"),
            (
                {"employee_number": "E1", "employee_full_name": "A", "net_salary": "1",
                 "employee_id": "not-a-uuid"},
                "employee_id",
            ),
        ],
    )
    def test_unmappable_rows(self, row, field):
        with pytest.raises(InvalidLineItemError) as exc_info:
            row_to_line_item(4, row)
        assert exc_info.value.index == 4
        assert exc_info.value.field == field


def test_rows_to_line_items_indexes_failures():
    rows = [
        {"employee_number": "E1", "employee_full_name": "A", "net_salary": "1"},
        {"employee_number": "E2", "employee_full_name": "B"},
    ]
    with pytest.raises(InvalidLineItemError) as exc_info:
        rows_to_line_items(rows)
    assert exc_info.value.index == 1


class TestLoadLineItems:

    def test_csv_export(self, tmp_path):
        path = tmp_path / "march.csv"
        path.write_text(
            "Employee Number,Employee Full Name,Net Salary,National ID\n"
            "EMP001,Ahmed Al-Rashid,5000.00,1012345678\n"
            "EMP002,Fatima Noor,7250.50,2098765432\n",
            encoding="utf-8",
        )

        items = load_line_items(path)
        assert [i.employee_number for i in items] == ["EMP001", "EMP002"]
        assert sum(i.net_salary for i in items) == Decimal("12250.50")

    def test_json_export(self, tmp_path):
        path = tmp_path / "march.json"
        path.write_text(
            '{"employees": ['
            '{"employee_number": "EMP001", "employee_full_name": "Ahmed Al-Rashid", '
            '"net_salary": 5000.00},'
            '{"employee_number": "EMP002", "employee_full_name": "Fatima Noor", '
            '"net_salary": 7250.50}'
            ']}',
            encoding="utf-8",
        )

        items = load_line_items(path, {"json_path": "employees"})
        assert [i.net_salary for i in items] == [Decimal("5000.00"), Decimal("7250.50")]

    def test_integer_json_amount(self, tmp_path):
        path = tmp_path / "march.jsonl"
        path.write_text(
            '{"employee_number": "EMP001", "employee_full_name": "A", "net_salary": 5000}\n',
            encoding="utf-8",
        )
        assert load_line_items(path)[0].net_salary == Decimal("5000")

    def test_xlsx_export(self, tmp_path):
        path = tmp_path / "march.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["March 2025 payroll"])
        ws.append(["Employee Number", "Full Name", "Net Salary", "Iqama"])
        ws.append(["EMP001", "Ahmed Al-Rashid", 5000, 1012345678])
        ws.append(["EMP002", "Fatima Noor", 7250.5, 2098765432])
        wb.save(path)

        items = load_line_items(path)
        assert [i.employee_full_name for i in items] == ["Ahmed Al-Rashid", "Fatima Noor"]
        assert [i.net_salary for i in items] == [Decimal("5000"), Decimal("7250.5")]
        assert items[1].national_id == "2098765432"

    def test_load_is_logged(self, tmp_path, captured_logs):
        path = tmp_path / "march.csv"
        path.write_text("employee_number,name,amount\nEMP001,A,1\n", encoding="utf-8")

        load_line_items(str(path))
        loaded = [r for r in captured_logs() if r["message"] == "payroll_export_loaded"]
        assert loaded[0]["line_item_count"] == 1
