"""
JSON source adapter.

Two layouts: a JSON array of objects (optionally nested, reached with a
dotted ``json_path`` such as ``"data.employees"``) and JSON Lines, one
object per line.  ``format`` picks the layout; by default ``.jsonl`` files
are JSON Lines and everything else is an array.

Keys are stripped and lowercased.  Fractional numbers are parsed straight
into ``Decimal`` so salaries never pass through a float.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Iterator

_MISSING = object()


def _resolve(data: Any, json_path: str) -> Any:
    """Walk ``a.b.0.c`` through objects and arrays; _MISSING if any step fails."""
    for step in filter(None, (part.strip() for part in json_path.split("."))):
        if isinstance(data, dict):
            data = data.get(step, _MISSING)
        elif isinstance(data, list) and step.isdigit() and int(step) < len(data):
            data = data[int(step)]
        else:
            return _MISSING
        if data is _MISSING:
            return _MISSING
    return data


def _records(items: Iterable[Any]) -> Iterator[dict[str, Any]]:
    for number, item in enumerate(items, 1):
        if not isinstance(item, dict):
            raise ValueError(f"Item {number} is not a JSON object")
        yield {key.strip().lower(): value for key, value in item.items()}


class JsonSourceAdapter:
    """Read JSON array or JSON Lines payroll exports as one dict per record."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        source_path = Path(source_path)
        layout = options.get("format") or (
            "jsonl" if source_path.suffix.lower() == ".jsonl" else "array"
        )
        encoding = options.get("encoding", "utf-8")

        if layout == "jsonl":
            yield from self._read_lines(source_path, encoding)
        else:
            yield from self._read_array(source_path, encoding, options.get("json_path"))

    @staticmethod
    def _read_lines(source_path: Path, encoding: str) -> Iterator[dict[str, Any]]:
        with source_path.open("r", encoding=encoding) as f:
            # Blank lines are skipped but still counted, so errors name the real line.
            for number, line in enumerate(f, 1):
                if not line.strip():
                    continue
                item = json.loads(line, parse_float=Decimal)
                if not isinstance(item, dict):
                    raise ValueError(f"Line {number} is not a JSON object")
                yield {key.strip().lower(): value for key, value in item.items()}

    @staticmethod
    def _read_array(
        source_path: Path, encoding: str, json_path: str | None
    ) -> Iterator[dict[str, Any]]:
        with source_path.open("r", encoding=encoding) as f:
            data = json.load(f, parse_float=Decimal)
        where = ""
        if json_path:
            data = _resolve(data, json_path)
            where = f" at '{json_path}'"
        if not isinstance(data, list):
            found = "nothing" if data is _MISSING else type(data).__name__
            raise ValueError(f"Expected a JSON array{where}, found {found}")
        yield from _records(data)
