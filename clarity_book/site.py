"""High-level orchestration for building the book site.

This module walks the source tree, renders markdown chapters into the page
shell, copies every other file verbatim, publishes the title page as the site
index, writes the Pygments stylesheet, copies configured assets such as the
playground WASM bundle, and finally stitches chapters together with
previous/next navigation.

Example
-------
>>> from pathlib import Path
>>> from clarity_book.config import load_book_config
>>> from clarity_book.site import BookBuilder
>>> builder = BookBuilder(load_book_config(Path("book.yaml")))  # doctest: +SKIP
>>> builder.run().pages  # doctest: +SKIP
[PosixPath('build/ch01-00-introduction.html'), ...]
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ

from clarity_book.generator import BookContentRenderer, RenderOptions, build_page
from clarity_book.linker import LinkReport, chapter_files, link_chapter, link_chapters

from ._constants import CHAPTER_FILE_PATTERN

if typ.TYPE_CHECKING:
    from pathlib import Path

    from clarity_book.config import BookConfig

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dc.dataclass(slots=True)
class BuildResult:
    """Files produced by a full build.

    Attributes
    ----------
    pages : list[Path]
        Rendered HTML pages, including the index page.
    copied : list[Path]
        Static files and assets copied into the output directory.
    links : LinkReport
        Outcome of the chapter linking pass.
    """

    pages: list[Path] = dc.field(default_factory=list)
    copied: list[Path] = dc.field(default_factory=list)
    links: LinkReport = dc.field(default_factory=LinkReport)


class BookBuilder:
    """Render a source tree of chapters into a static book site."""

    def __init__(self, config: BookConfig) -> None:
        """Initialize the builder with a resolved configuration.

        Parameters
        ----------
        config : BookConfig
            Source/output directories, page shell, summary, and asset settings.
        """
        self.config = config

    def run(self) -> BuildResult:
        """Build every source file and link the rendered chapters.

        Returns
        -------
        BuildResult
            Pages written, files copied, and the chapter linking report.

        Raises
        ------
        OSError
            Raised when any source cannot be read or output cannot be written;
            a one-shot build stops at the first failure.
        ChapterLinkError
            Raised when ``strict_links`` is enabled and a chapter lacks a
            navigation marker.
        """
        out_dir = self.config.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        options = self._render_options()

        result = BuildResult()
        for source in self.source_files():
            logger.debug("Building %s", source)
            written = self._build_file(source, options)
            if source.suffix == MARKDOWN_SUFFIX:
                result.pages.extend(written)
            else:
                result.copied.extend(written)

        stylesheet = self._write_stylesheet()
        if stylesheet is not None:
            result.copied.append(stylesheet)
        result.copied.extend(self._copy_assets())
        result.links = link_chapters(
            chapter_files(out_dir), strict=self.config.strict_links
        )
        return result

    def rebuild(self, source: Path) -> list[Path]:
        """Rebuild a single changed source file and relink it when a chapter.

        Parameters
        ----------
        source : Path
            File inside the source directory that changed.

        Returns
        -------
        list[Path]
            Output files written for ``source``.
        """
        written = self._build_file(source, self._render_options())
        for path in written:
            if CHAPTER_FILE_PATTERN.match(path.name):
                self._relink(path)
        return written

    def source_files(self) -> list[Path]:
        """Return every file under the source directory, sorted by path."""
        return sorted(
            (path for path in self.config.source_dir.rglob("*") if path.is_file()),
            key=lambda path: path.as_posix(),
        )

    def output_path(self, source: Path) -> Path:
        """Return the output location mirroring ``source``."""
        relative = source.relative_to(self.config.source_dir)
        target = self.config.output_dir / relative
        if source.suffix == MARKDOWN_SUFFIX:
            return target.with_suffix(".html")
        return target

    def _build_file(self, source: Path, options: RenderOptions) -> list[Path]:
        """Render or copy ``source`` and return the output paths."""
        target = self.output_path(source)
        target.parent.mkdir(parents=True, exist_ok=True)
        if source.suffix != MARKDOWN_SUFFIX:
            shutil.copyfile(source, target)
            return [target]

        html = build_page(source, options)
        target.write_text(html, encoding="utf-8")
        written = [target]
        if source.name == self.config.title_page:
            index_path = self.config.output_dir / self.config.index_name
            index_path.write_text(html, encoding="utf-8")
            written.append(index_path)
        return written

    def _render_options(self) -> RenderOptions:
        """Read the page shell and summary shared by every page."""
        template = self.config.template.read_text(encoding="utf-8")
        summary = ""
        summary_path = self.config.summary
        if summary_path is not None and summary_path.exists():
            summary = summary_path.read_text(encoding="utf-8")
        return RenderOptions(
            template=template,
            summary=summary,
            pygments_style=self.config.pygments_style,
        )

    def _write_stylesheet(self) -> Path | None:
        """Write the Pygments CSS for highlighted code blocks."""
        if not self.config.stylesheet:
            return None
        path = self.config.output_dir / self.config.stylesheet
        path.parent.mkdir(parents=True, exist_ok=True)
        renderer = BookContentRenderer(self.config.pygments_style)
        path.write_text(renderer.stylesheet, encoding="utf-8")
        return path

    def _copy_assets(self) -> list[Path]:
        """Copy configured assets into the output directory."""
        copied: list[Path] = []
        for asset in self.config.assets:
            target = self.config.output_dir / asset.target
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(asset.source, target)
            copied.append(target)
        return copied

    def _relink(self, chapter: Path) -> None:
        """Re-insert navigation into ``chapter`` using its current neighbours."""
        chapters = chapter_files(self.config.output_dir)
        if len(chapters) < 2 or chapter not in chapters:
            return
        index = chapters.index(chapter)
        previous = chapters[index - 1].name if index > 0 else None
        next_ = chapters[index + 1].name if index + 1 < len(chapters) else None
        # Neighbours keep the navigation written by the last full build.
        link_chapter(chapter, previous, next_, strict=self.config.strict_links)


__all__ = ["BuildResult", "BookBuilder"]
