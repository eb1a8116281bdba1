r"""Render single book pages from markdown into the HTML page shell.

The page shell is a plain HTML file carrying ``@title``, ``@body`` and
``@summary`` placeholders. :func:`render_page` renders the chapter body and the
table of contents with a renderer bound to the page's active link, then
substitutes both into the shell. The active link travels as an argument, so
pages can be rendered in any order or interleaved.

Example
-------
>>> from clarity_book.generator.page_builder import derive_title, substitute_template
>>> derive_title("ch01-02-getting-started.md")
'Getting Started'
>>> substitute_template("<h1>@title</h1>@unknown", {"title": "Intro"})
'<h1>Intro</h1>@unknown'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .renderer import BookContentRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .models import RenderOptions

PLACEHOLDER_PATTERN = re.compile(r"@([a-z]+)")
CHAPTER_PREFIX_PATTERN = re.compile(r"^ch[0-9]+-[0-9]+-")


def substitute_template(template: str, fields: cabc.Mapping[str, str]) -> str:
    """Replace each ``@word`` in ``template`` with ``fields[word]``.

    Values are inserted verbatim and are not themselves scanned for
    placeholders. Words missing from ``fields`` are left in place.
    """

    def _replace(match: re.Match[str]) -> str:
        value = fields.get(match.group(1))
        return match.group(0) if value is None else value

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def derive_title(filename: str) -> str:
    """Return a human title for a chapter file name.

    The ``chN-N-`` numbering prefix is removed, hyphens become spaces, each
    word is capitalised and the file extension is dropped.
    """
    stem = CHAPTER_PREFIX_PATTERN.sub("", filename)
    if "." in stem:
        stem = stem.rsplit(".", 1)[0]
    words = stem.replace("-", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def render_page(source_markdown: str, options: RenderOptions) -> str:
    """Render ``source_markdown`` and the summary into ``options.template``.

    Parameters
    ----------
    source_markdown : str
        Chapter markdown.
    options : RenderOptions
        Page shell, summary markdown, title, active link and Pygments style.

    Returns
    -------
    str
        The page shell with ``@title``, ``@body`` and ``@summary`` replaced.
    """
    renderer = BookContentRenderer(
        options.pygments_style, active_link=options.active_link
    )
    return substitute_template(
        options.template,
        {
            "title": options.title,
            "body": renderer.markdown(source_markdown),
            "summary": renderer.markdown(options.summary),
        },
    )


def build_page(path: Path, options: RenderOptions) -> str:
    """Read the markdown file at ``path`` and render it as a page.

    The title is derived from the file name and, unless ``options`` already
    names one, the active link defaults to the file's rendered page name.
    Read errors propagate to the caller.
    """
    content = path.read_text(encoding="utf-8")
    page_options = dc.replace(
        options,
        title=options.title or derive_title(path.name),
        active_link=options.active_link or path.name,
    )
    return render_page(content, page_options)


__all__ = ["build_page", "derive_title", "render_page", "substitute_template"]
