"""Helpers for rewriting relative markdown links to rendered chapter pages."""

from __future__ import annotations

import typing as typ

from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .models import RenderHooks
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any
    RenderHooks = typ.Any

MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"
SELECTED_CLASS = "selected"


def rewrite_markdown_href(href: str) -> str:
    """Point a relative ``.md`` link at its ``.html`` page, keeping the fragment.

    Examples
    --------
    >>> rewrite_markdown_href("foo.md#bar")
    'foo.html#bar'
    >>> rewrite_markdown_href("https://example.com/x.md")
    'https://example.com/x.md'
    """
    if href.lower().startswith(("http://", "https://")):
        return href
    path, sep, fragment = href.partition("#")
    if not path.endswith(MARKDOWN_SUFFIX):
        return href
    return f"{path[: -len(MARKDOWN_SUFFIX)]}{HTML_SUFFIX}{sep}{fragment}"


def normalize_active_link(link: str) -> str:
    """Return the rendered page name for ``link`` (``.md`` becomes ``.html``)."""
    if link.endswith(MARKDOWN_SUFFIX):
        return f"{link[: -len(MARKDOWN_SUFFIX)]}{HTML_SUFFIX}"
    return link


def _add_class(element: Element, name: str) -> None:
    classes = (element.get("class") or "").split()
    if name not in classes:
        classes.insert(0, name)
    element.set("class", " ".join(classes))


class LinkRewriteTreeprocessor(Treeprocessor):
    """Rewrite anchors through the render hooks and flag the active page."""

    def __init__(self, md: Markdown, hooks: RenderHooks) -> None:
        super().__init__(md)
        self.hooks = hooks

    def run(self, root: Element) -> Element:
        """Rewrite every anchor in the parsed markdown tree."""
        for element in root.iter("a"):
            href = element.get("href")
            if href is None:
                continue
            target = self.hooks.render_link(href)
            element.set("href", target.href)
            if target.selected:
                _add_class(element, SELECTED_CLASS)
        return root


__all__ = [
    "LinkRewriteTreeprocessor",
    "normalize_active_link",
    "rewrite_markdown_href",
]
