"""
Format Variant Loader (``wps_config.loader``).

Responsibility
--------------
Loads YAML format-variant files and parses them into
``wps_config.schema.WageFormatConfig`` instances.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top-level document that is not a mapping  -> ``InvalidFormatConfigError``.
* Unknown or invalid keys  -> ``InvalidFormatConfigError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from wps_config.schema import WageFormatConfig
from wps_kernel.exceptions import InvalidFormatConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidFormatConfigError(str(path), "top-level YAML document must be a mapping")
    return data


def parse_format_config(data: dict[str, Any]) -> WageFormatConfig:
    """Parse a ``WageFormatConfig`` from a dict."""
    return WageFormatConfig.from_dict(data)


def load_format_config(path: Path) -> WageFormatConfig:
    """Load and validate one format-variant YAML file."""
    return parse_format_config(load_yaml_file(Path(path)))


def dump_format_config(config: WageFormatConfig) -> str:
    """Serialize a variant to YAML text that ``load_format_config`` reads back."""
    return yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True)
