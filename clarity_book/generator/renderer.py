"""Utilities for rendering book markdown and playground code blocks."""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as etree
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markdown import Markdown
from markdown.extensions import Extension
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from clarity_book.grammar import ClarityLexer

from .blocks import (
    FOOTNOTE_DEFINITION_PATTERN,
    SUPERSCRIPT_PATTERN,
    FootnoteBlockProcessor,
    FootnoteReferenceInlineProcessor,
    PlaygroundFencePreprocessor,
    SuperscriptTreeprocessor,
)
from .link_rewriter import (
    LinkRewriteTreeprocessor,
    normalize_active_link,
    rewrite_markdown_href,
)
from .models import CodeBlockOptions, LinkTarget

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from pygments.lexer import Lexer

    from .models import RenderHooks

CLARITY_LANGUAGE = "clarity"
CODE_CSS_CLASS = "code"
FOOTNOTE_BACKREF = "↵"
TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _resolve_lexer(language: str) -> Lexer:
    """Return the lexer for ``language``, falling back to plain text."""
    name = language.lower() or "text"
    if name == CLARITY_LANGUAGE:
        return ClarityLexer(stripnl=False)
    try:
        return get_lexer_by_name(name, stripnl=False)
    except ClassNotFound:
        return get_lexer_by_name("text", stripnl=False)


class BookExtension(Extension):
    """Register the book's markdown overrides on a ``Markdown`` instance.

    The extension owns no rendering logic; it wires Python-Markdown's
    processor registries to the supplied ``hooks`` object.
    """

    def __init__(self, hooks: RenderHooks) -> None:
        super().__init__()
        self.hooks = hooks

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register fence, footnote, link and superscript processors."""
        md.preprocessors.register(
            PlaygroundFencePreprocessor(md, self.hooks), "book_fenced_code", 25
        )
        md.parser.blockprocessors.register(
            FootnoteBlockProcessor(md.parser, self.hooks), "book_footnote", 16
        )
        md.inlinePatterns.register(
            FootnoteReferenceInlineProcessor(), "book_footnote_ref", 175
        )
        md.treeprocessors.register(
            LinkRewriteTreeprocessor(md, self.hooks), "book_links", 15
        )
        md.treeprocessors.register(
            SuperscriptTreeprocessor(md, self.hooks), "book_superscript", 14
        )


class BookContentRenderer:
    """Render chapter markdown with playground code blocks and page links."""

    def __init__(
        self,
        pygments_style: str = "monokai",
        *,
        active_link: str = "",
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize a renderer bound to a single page.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        active_link : str, optional
            Page currently being rendered; links resolving to it receive the
            ``selected`` class. ``.md`` names are normalised to ``.html``.
        templates_dir : Path, optional
            Directory holding ``code_block.jinja``; defaults to the package
            templates.
        """
        self.pygments_style = pygments_style
        self.active_link = normalize_active_link(active_link)
        self._formatter = HtmlFormatter(
            style=pygments_style, cssclass=CODE_CSS_CLASS, nowrap=True
        )
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._code_template = self.env.get_template("code_block.jinja")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(f".{CODE_CSS_CLASS}")

    def markdown(self, text: str) -> str:
        """Render markdown into HTML using the book extensions."""
        if not text.strip():
            return ""
        md = Markdown(extensions=[BookExtension(self), "tables", "sane_lists"])
        return md.convert(text)

    def render_code_block(self, code: str, info: str) -> str:
        """Render a fenced block into a playground container.

        Parameters
        ----------
        code : str
            Raw code from the fence.
        info : str
            Fence info string, ``language`` optionally followed by a comma and
            a JSON options object.

        Returns
        -------
        str
            ``div.code`` markup with copy/reset/play buttons, the highlighted
            code, and ``data-language``/``data-options`` attributes when a
            language is given.
        """
        language, _sep, payload = info.strip().partition(",")
        language = language.strip()
        options = CodeBlockOptions.parse(payload)
        code = code.rstrip("\n") + "\n"
        playable = language.lower() == CLARITY_LANGUAGE and not options.nonplayable
        editable = playable and not options.noneditable
        html = self._code_template.render(
            language=language,
            options_json=options.to_json(),
            code=highlight(code, _resolve_lexer(language), self._formatter),
            playable=playable,
            editable=editable,
        )
        return f"{html}\n"

    def render_link(self, href: str) -> LinkTarget:
        """Rewrite ``href`` and flag it when it points at the active page."""
        rewritten = rewrite_markdown_href(href)
        selected = bool(rewritten) and rewritten == self.active_link
        return LinkTarget(rewritten, selected)

    def render_paragraph(self, block: str) -> Element | None:
        """Return a footnote definition for blocks opening with ``[^ref]``."""
        match = FOOTNOTE_DEFINITION_PATTERN.match(block)
        if match is None:
            return None
        ref = match.group(1)
        footnote = etree.Element("div", {"class": "footnote"})
        marker = etree.SubElement(footnote, "sup", {"id": f"fn:{ref}"})
        marker.text = ref
        marker.tail = f"{block[match.end() :]} "
        backref = etree.SubElement(footnote, "a", {"href": f"#fnref:{ref}"})
        backref.text = FOOTNOTE_BACKREF
        return footnote

    def render_text(self, text: str) -> tuple[str, str, str] | None:
        """Split the first ``<digits>^<digits>`` in ``text`` for superscripting."""
        match = SUPERSCRIPT_PATTERN.search(text)
        if match is None:
            return None
        return (
            f"{text[: match.start()]}{match.group(1)}",
            match.group(2),
            text[match.end() :],
        )


__all__ = ["BookContentRenderer", "BookExtension"]
