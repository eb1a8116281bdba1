"""Stitch rendered chapters together with previous/next navigation.

The linker runs after every chapter has been written. For each file it
inserts a ``div.prevnext`` fragment at the start of the trailing footnote
block, or just before the closing ``</article>`` when the chapter has no
footnotes. Files lacking both markers are left untouched and reported.

Example
-------
>>> from clarity_book.linker import link_page
>>> link_page("<article>Body</article>", None, "ch01-02-next.html")
'<article>Body<div class="prevnext"><div></div><a href="ch01-02-next.html" class="next"></a></div></article>'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ._constants import ARTICLE_CLOSE_MARKER, CHAPTER_FILE_PATTERN, FOOTNOTE_MARKER

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


class ChapterLinkError(RuntimeError):
    """Raised in strict mode when a chapter has no navigation insertion point."""


@dc.dataclass(slots=True)
class LinkReport:
    """Outcome of a linking pass.

    Attributes
    ----------
    linked : list[Path]
        Chapters rewritten with navigation.
    skipped : list[Path]
        Chapters left unmodified because no insertion marker was found.
    """

    linked: list[Path] = dc.field(default_factory=list)
    skipped: list[Path] = dc.field(default_factory=list)


def _insertion_point(content: str) -> int:
    index = content.find(FOOTNOTE_MARKER)
    if index == -1:
        index = content.rfind(ARTICLE_CLOSE_MARKER)
    return index


def link_page(content: str, previous: str | None, next_: str | None) -> str | None:
    """Return ``content`` with navigation inserted, or ``None`` without a marker.

    Parameters
    ----------
    content : str
        Rendered chapter HTML.
    previous : str or None
        Href of the preceding chapter; an empty placeholder is emitted when
        ``None``.
    next_ : str or None
        Href of the following chapter; an empty placeholder is emitted when
        ``None``.
    """
    index = _insertion_point(content)
    if index == -1:
        return None
    navigation = _env.get_template("prevnext.jinja").render(
        previous_href=previous, next_href=next_
    )
    return f"{content[:index]}{navigation}{content[index:]}"


def link_chapters(
    paths: cabc.Sequence[Path], *, strict: bool = False
) -> LinkReport:
    """Insert previous/next navigation into each chapter file in place.

    Parameters
    ----------
    paths : Sequence[Path]
        Chapter files in reading order. The order is taken as given.
    strict : bool, optional
        Raise :class:`ChapterLinkError` instead of skipping a chapter that has
        no insertion marker.

    Returns
    -------
    LinkReport
        Linked and skipped chapter paths. A lone chapter has no neighbours and
        is not linked.

    Raises
    ------
    ChapterLinkError
        When ``strict`` is set and a chapter has no insertion marker.
    OSError
        When a chapter cannot be read or written.
    """
    report = LinkReport()
    for index, path in enumerate(paths):
        previous = paths[index - 1].name if index > 0 else None
        next_ = paths[index + 1].name if index + 1 < len(paths) else None
        if previous is None and next_ is None:
            continue
        if link_chapter(path, previous, next_, strict=strict):
            report.linked.append(path)
        else:
            report.skipped.append(path)
    return report


def link_chapter(
    path: Path, previous: str | None, next_: str | None, *, strict: bool = False
) -> bool:
    """Insert navigation into the chapter at ``path``; ``False`` when skipped."""
    linked = link_page(path.read_text(encoding="utf-8"), previous, next_)
    if linked is None:
        if strict:
            msg = f"Unable to link {path}: no footnote or article marker."
            raise ChapterLinkError(msg)
        logger.warning("Unable to link %s", path)
        return False
    path.write_text(linked, encoding="utf-8")
    return True


def chapter_files(output_dir: Path) -> list[Path]:
    """Return rendered chapter files under ``output_dir`` sorted by path."""
    return sorted(
        (
            path
            for path in output_dir.rglob("*.html")
            if path.is_file() and CHAPTER_FILE_PATTERN.match(path.name)
        ),
        key=lambda path: path.as_posix(),
    )


__all__ = [
    "ChapterLinkError",
    "LinkReport",
    "chapter_files",
    "link_chapter",
    "link_chapters",
    "link_page",
]
