"""Utility helpers shared by the book configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import AssetConfig, BookConfigError

DEFAULT_SUMMARY_NAME = "SUMMARY.md"


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _resolve_path(base_dir: Path, value: object) -> Path:
    """Resolve ``value`` against ``base_dir`` unless it is already absolute."""
    path = Path(str(value)).expanduser()
    if path.is_absolute():
        return path
    return base_dir / path


def _resolve_summary(
    source_dir: Path, payload: typ.Mapping[str, typ.Any]
) -> Path | None:
    """Return the summary path; relative values resolve inside ``source_dir``."""
    if "summary" not in payload:
        return source_dir / DEFAULT_SUMMARY_NAME
    value = _optional_str(payload["summary"])
    if value is None:
        return None
    return _resolve_path(source_dir, value)


def _build_assets(
    base_dir: Path, payload: object | None
) -> list[AssetConfig]:
    """Build asset copy entries from the ``assets`` list."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        msg = "'assets' must be a list of {source, target} mappings."
        raise BookConfigError(msg)
    assets: list[AssetConfig] = []
    for entry in payload:
        match entry:
            case {"source": source, **rest}:
                source_path = _resolve_path(base_dir, source)
                target = _optional_str(rest.get("target")) or source_path.name
                assets.append(AssetConfig(source=source_path, target=target))
            case str():
                source_path = _resolve_path(base_dir, entry)
                assets.append(AssetConfig(source=source_path, target=source_path.name))
            case _:
                msg = f"Invalid asset entry: {entry!r}"
                raise BookConfigError(msg)
    return assets


__all__ = [
    "DEFAULT_SUMMARY_NAME",
    "_build_assets",
    "_optional_str",
    "_resolve_path",
    "_resolve_summary",
]
