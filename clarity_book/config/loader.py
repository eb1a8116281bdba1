"""Load the book configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import _build_assets, _optional_str, _resolve_path, _resolve_summary
from .models import BookConfig, BookConfigError

DEFAULT_CONFIG = Path("book.yaml")


def load_book_config(path: Path) -> BookConfig:
    """Load the YAML configuration describing a book build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``book.yaml``). Relative paths inside the file resolve against the
        file's directory.

    Returns
    -------
    BookConfig
        Parsed configuration with defaults applied for omitted keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    BookConfigError
        If the top-level structure is not a mapping or a value is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from clarity_book.config import load_book_config
    >>> config = load_book_config(Path("book.yaml"))  # doctest: +SKIP
    >>> config.title_page  # doctest: +SKIP
    'title-page.md'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise BookConfigError(msg)
    return build_book_config(dict(loaded), base_dir=path.resolve().parent)


def build_book_config(
    raw: typ.Mapping[str, typ.Any], *, base_dir: Path
) -> BookConfig:
    """Build a :class:`BookConfig` from a parsed mapping rooted at ``base_dir``."""
    defaults = BookConfig()
    source_dir = _resolve_path(base_dir, raw.get("source_dir", defaults.source_dir))
    output_dir = _resolve_path(base_dir, raw.get("output_dir", defaults.output_dir))
    template = _resolve_path(base_dir, raw.get("template", defaults.template))

    title_page = _optional_str(raw.get("title_page")) or defaults.title_page
    index_name = _optional_str(raw.get("index_name")) or defaults.index_name
    pygments_style = _optional_str(raw.get("pygments_style")) or defaults.pygments_style
    stylesheet = (
        _optional_str(raw["stylesheet"]) if "stylesheet" in raw else defaults.stylesheet
    )

    strict_links = raw.get("strict_links", defaults.strict_links)
    if not isinstance(strict_links, bool):
        msg = "'strict_links' must be a boolean."
        raise BookConfigError(msg)

    return BookConfig(
        source_dir=source_dir,
        output_dir=output_dir,
        template=template,
        summary=_resolve_summary(source_dir, raw),
        title_page=title_page,
        index_name=index_name,
        pygments_style=pygments_style,
        stylesheet=stylesheet,
        strict_links=strict_links,
        assets=_build_assets(base_dir, raw.get("assets")),
    )


__all__ = ["DEFAULT_CONFIG", "build_book_config", "load_book_config"]
