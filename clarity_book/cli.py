"""Cyclopts CLI entrypoint for building and watching the Clarity book site.

The ``book`` console script defined here renders the markdown chapters under
the source directory into static HTML, copies static files and playground
assets, and links chapters with previous/next navigation. ``book watch``
keeps the output in sync while chapters are being edited.

Examples
--------
Build the book using ``book.yaml`` in the current directory:

>>> from clarity_book.cli import main
>>> main()  # doctest: +SKIP

Build from a different source tree into a custom directory:

>>> from clarity_book.cli import app
>>> app(["build", "--source-dir", "chapters", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import DEFAULT_CONFIG, BookConfig, build_book_config, load_book_config
from .site import BookBuilder
from .watch import DEFAULT_INTERVAL, SourceWatcher

app = App(name="book", config=cyclopts.config.Env("BOOK_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _resolve_config(
    config: Path, source_dir: Path | None, output_dir: Path | None
) -> BookConfig:
    """Load ``config`` (or defaults when the default file is absent) and apply overrides."""
    if config.exists() or config != DEFAULT_CONFIG:
        book = load_book_config(config)
    else:
        book = build_book_config({}, base_dir=Path.cwd())

    if source_dir is not None:
        new_source = source_dir.resolve()
        summary = book.summary
        if summary is not None and summary.is_relative_to(book.source_dir):
            summary = new_source / summary.relative_to(book.source_dir)
        book = dc.replace(book, source_dir=new_source, summary=summary)
    if output_dir is not None:
        book = dc.replace(book, output_dir=output_dir.resolve())
    return book


@app.command(help="Render the book's markdown sources into a static site.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to book config", env_var="BOOK_CONFIG")
    ] = DEFAULT_CONFIG,
    source_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the source folder", env_var="BOOK_SOURCE_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="BOOK_OUTPUT_DIR"),
    ] = None,
    strict_links: typ.Annotated[
        bool,
        Parameter(help="Fail when a chapter cannot be linked"),
    ] = False,
) -> None:
    """Build every page, copy static files, and link chapters.

    Parameters
    ----------
    config : Path, optional
        Path to the ``book.yaml`` configuration file. When the default file is
        missing, built-in defaults rooted at the working directory are used.
    source_dir : Path or None, optional
        Override the markdown source directory.
    output_dir : Path or None, optional
        Override the output directory.
    strict_links : bool, optional
        Treat chapters without a navigation marker as a build failure.

    Raises
    ------
    OSError
        Any read or write failure aborts the build.
    ChapterLinkError
        When strict linking is requested and a chapter cannot be linked.
    """
    book = _resolve_config(config, source_dir, output_dir)
    if strict_links:
        book = dc.replace(book, strict_links=True)
    result = BookBuilder(book).run()
    for path in [*result.pages, *result.copied]:
        print(f"wrote {_format_path(path)}")
    print(f"linked {len(result.links.linked)} chapters")
    for path in result.links.skipped:
        print(f"skipped {_format_path(path)} (no navigation marker)")


@app.command(help="Rebuild pages whenever their sources change.")
def watch(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to book config", env_var="BOOK_CONFIG")
    ] = DEFAULT_CONFIG,
    source_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the source folder", env_var="BOOK_SOURCE_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="BOOK_OUTPUT_DIR"),
    ] = None,
    interval: typ.Annotated[
        float, Parameter(help="Seconds between polls")
    ] = DEFAULT_INTERVAL,
) -> None:
    """Watch the source directory and rebuild changed files until interrupted."""
    book = _resolve_config(config, source_dir, output_dir)
    watcher = SourceWatcher(BookBuilder(book))
    print(f'Watching "{_format_path(book.source_dir)}" for changes')
    try:
        watcher.run(interval=interval)
    except KeyboardInterrupt:
        print("Stopped watching")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``book`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
