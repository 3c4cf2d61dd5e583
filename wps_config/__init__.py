"""
wps_config -- format-variant configuration for wage protection files.

Responsibility:
    Provides ``get_format_config(name)``, the way callers obtain the
    immutable ``WageFormatConfig`` handed to the encoder at construction.
    Bundled variants live in ``wps_config/formats/<name>.yaml``.

Failure modes:
    - ``FormatVariantNotFoundError`` -- no bundled variant with that name.
    - ``InvalidFormatConfigError`` -- the variant fails schema validation.

Audit relevance:
    Every load emits a ``wage_format_config_loaded`` log entry carrying the
    variant name and checksum, tying generated files to the exact variant.
"""

from __future__ import annotations

from pathlib import Path

from wps_config.loader import load_format_config
from wps_config.schema import FieldWidths, WageFormatConfig
from wps_kernel.exceptions import FormatVariantNotFoundError
from wps_kernel.logging_config import get_logger

logger = get_logger("config")

_DEFAULT_FORMATS_DIR = Path(__file__).parent / "formats"

DEFAULT_FORMAT = "sarie_sif"


def available_formats(formats_dir: Path | None = None) -> tuple[str, ...]:
    """Names of the variants found in ``formats_dir`` (bundled by default)."""
    directory = formats_dir or _DEFAULT_FORMATS_DIR
    return tuple(sorted(p.stem for p in directory.glob("*.yaml")))


def get_format_config(
    name: str = DEFAULT_FORMAT,
    formats_dir: Path | None = None,
) -> WageFormatConfig:
    """
    Load a named format variant.

    Raises:
        FormatVariantNotFoundError: if no ``<name>.yaml`` exists.
        InvalidFormatConfigError: if the variant fails validation.
    """
    directory = formats_dir or _DEFAULT_FORMATS_DIR
    path = directory / f"{name}.yaml"
    if not path.is_file():
        raise FormatVariantNotFoundError(name)

    config = load_format_config(path)
    logger.info(
        "wage_format_config_loaded",
        extra={"format_name": config.name, "checksum": config.checksum, "path": str(path)},
    )
    return config


__all__ = [
    "DEFAULT_FORMAT",
    "FieldWidths",
    "WageFormatConfig",
    "available_formats",
    "get_format_config",
]
