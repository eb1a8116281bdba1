"""Typed dataclasses describing the book build configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class BookConfigError(ValueError):
    """Raised when the book configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class AssetConfig:
    """Extra file copied into the output directory on every build.

    Attributes
    ----------
    source : Path
        File to copy, such as the playground's WASM bundle.
    target : str
        Destination path relative to the output directory.
    """

    source: Path
    target: str


@dc.dataclass(slots=True)
class BookConfig:
    """Resolved settings for building the book.

    Attributes
    ----------
    source_dir : Path
        Directory holding markdown chapters and static files.
    output_dir : Path
        Directory the rendered site is written to.
    template : Path
        HTML page shell with ``@title``, ``@body`` and ``@summary``.
    summary : Path or None
        Markdown table of contents rendered into every page; ``None`` disables
        it.
    title_page : str
        Source file name that is also published as the index page.
    index_name : str
        File name of the index page.
    pygments_style : str
        Pygments style used for highlighting and the generated stylesheet.
    stylesheet : str or None
        Output-relative path of the highlight stylesheet; ``None`` skips it.
    strict_links : bool
        Fail the build when a chapter cannot receive navigation links.
    assets : list[AssetConfig]
        Additional files copied into the output directory.
    """

    source_dir: Path = dc.field(default_factory=lambda: Path("src"))
    output_dir: Path = dc.field(default_factory=lambda: Path("build"))
    template: Path = dc.field(default_factory=lambda: Path("templates/base.html"))
    summary: Path | None = dc.field(default_factory=lambda: Path("src/SUMMARY.md"))
    title_page: str = "title-page.md"
    index_name: str = "index.html"
    pygments_style: str = "monokai"
    stylesheet: str | None = "highlight.css"
    strict_links: bool = False
    assets: list[AssetConfig] = dc.field(default_factory=list)
