#!/usr/bin/env python3
"""
Generate a wage protection file from a payroll export.

Reads line items from a CSV or JSON export, encodes them with a format
variant, and writes the file into the output directory.  Encoding warnings
(truncated identifiers, fallback account references) go to stderr and must
be reviewed before the file is sent to the bank.

Usage:
    python3 scripts/generate_wage_file.py --items <path> --employer-id <id> \
        --establishment-id <id> --period <label> --payment-date <YYYY-MM-DD> [options]

Examples:
    # Bundled SARIE variant, file written to the current directory
    python3 scripts/generate_wage_file.py --items march.csv \
        --employer-id 1000000001 --establishment-id 2000000002 \
        --period 2025-03 --payment-date 2025-03-31

    # A bank-specific variant kept outside the package
    python3 scripts/generate_wage_file.py --items march.json --format-file bank_x.yaml \
        --employer-id 1000000001 --establishment-id 2000000002 \
        --period 2025-03 --payment-date 2025-03-31 --output-dir out/
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a wage protection file from a payroll export.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--items",
        required=True,
        type=Path,
        help="Payroll export with one row per employee (CSV, JSON, JSON Lines or XLSX).",
    )
    parser.add_argument("--employer-id", required=True, help="Employer registration id.")
    parser.add_argument(
        "--establishment-id", required=True, help="Establishment (branch) id."
    )
    parser.add_argument(
        "--period", required=True, help="Pay period label used in the file name (e.g. 2025-03)."
    )
    parser.add_argument(
        "--payment-date",
        required=True,
        type=date.fromisoformat,
        help="Payment and value date (YYYY-MM-DD).",
    )
    variant = parser.add_mutually_exclusive_group()
    variant.add_argument(
        "--format",
        default=None,
        help="Bundled format variant name (default: sarie_sif).",
    )
    variant.add_argument(
        "--format-file",
        type=Path,
        default=None,
        help="Path to a format variant YAML file.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory the file is written to (default: current directory).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Structured log level on stderr (default: WARNING).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    import yaml

    from wps_config import DEFAULT_FORMAT, get_format_config
    from wps_config.loader import load_format_config
    from wps_ingestion import load_line_items
    from wps_kernel.exceptions import WpsKernelError
    from wps_kernel.logging_config import configure_logging
    from wps_modules.wage_file import WageFileEncoder, WageFileRequest

    configure_logging(level=args.log_level)

    items_path = args.items.resolve()
    if not items_path.is_file():
        print(f"ERROR: File not found: {items_path}", file=sys.stderr)
        return 1

    try:
        if args.format_file is not None:
            config = load_format_config(args.format_file)
        else:
            config = get_format_config(args.format or DEFAULT_FORMAT)

        line_items = load_line_items(items_path)
        wage_file = WageFileEncoder(config).encode(
            WageFileRequest(
                employer_id=args.employer_id,
                establishment_id=args.establishment_id,
                line_items=tuple(line_items),
                payment_date=args.payment_date,
                period_identifier=args.period,
            )
        )
        payload = wage_file.to_bytes()
        args.output_dir.mkdir(parents=True, exist_ok=True)
        target = args.output_dir / wage_file.file_name
        target.write_bytes(payload)
    except WpsKernelError as e:
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    for warning in wage_file.warnings:
        print(f"WARNING [{warning.code}]: {warning.message}", file=sys.stderr)

    print(f"Wrote {target}")
    print(f"  Records: {wage_file.record_count}")
    print(f"  Total:   {wage_file.total_amount}")
    if wage_file.has_warnings:
        print(f"  Warnings: {len(wage_file.warnings)} (see stderr)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
