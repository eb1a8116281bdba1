"""Markdown processors for playground code fences, footnotes, and exponents.

Each processor delegates the actual rendering decision to a
:class:`~clarity_book.generator.models.RenderHooks` implementation and only
handles the Python-Markdown plumbing: finding fences in the raw lines,
claiming footnote blocks before they become paragraphs, and splitting text
nodes once inline parsing has finished.
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor
from markdown.inlinepatterns import InlineProcessor
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
    from markdown.blockparser import BlockParser

    from .models import RenderHooks
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    BlockParser = typ.Any
    Element = typ.Any
    RenderHooks = typ.Any

FENCE_BLOCK_PATTERN = re.compile(
    r"(?P<indent>^[ ]{0,3})(?P<fence>`{3,}|~{3,})[ ]*(?P<info>[^\n]*?)[ ]*\n"
    r"(?P<code>.*?)(?<=\n)(?P=indent)(?P=fence)[ ]*$",
    re.MULTILINE | re.DOTALL,
)
FOOTNOTE_DEFINITION_PATTERN = re.compile(r"^\[\^([^\]]+)\]")
FOOTNOTE_REFERENCE_PATTERN = r"\[\^([^\]]+)\](?!\()"
SUPERSCRIPT_PATTERN = re.compile(r"([0-9]+)\^([0-9]+)")
SKIP_TEXT_TAGS = frozenset({"code", "pre", "script", "style"})


def _strip_indent(code: str, width: int) -> str:
    """Remove up to ``width`` leading spaces from every line of ``code``."""
    if not width:
        return code
    return re.sub(rf"^ {{1,{width}}}", "", code, flags=re.MULTILINE)


class PlaygroundFencePreprocessor(Preprocessor):
    """Replace fenced code blocks with stashed playground containers.

    Fences accept an info string of the form ``language[,json-options]`` and
    may be indented by up to three spaces, e.g. inside list items.
    """

    def __init__(self, md: Markdown, hooks: RenderHooks) -> None:
        super().__init__(md)
        self.hooks = hooks

    def run(self, lines: list[str]) -> list[str]:
        text = "\n".join(lines)
        while True:
            match = FENCE_BLOCK_PATTERN.search(text)
            if match is None:
                break
            indent = match.group("indent")
            code = _strip_indent(match.group("code"), len(indent))
            html = self.hooks.render_code_block(code, match.group("info"))
            placeholder = self.md.htmlStash.store(html)
            text = f"{text[: match.start()]}\n{indent}{placeholder}\n{text[match.end() :]}"
        return text.split("\n")


class FootnoteBlockProcessor(BlockProcessor):
    """Turn blocks opening with ``[^ref]`` into footnote definitions."""

    def __init__(self, parser: BlockParser, hooks: RenderHooks) -> None:
        super().__init__(parser)
        self.hooks = hooks

    def test(self, parent: Element, block: str) -> bool:
        return FOOTNOTE_DEFINITION_PATTERN.match(block) is not None

    def run(self, parent: Element, blocks: list[str]) -> bool:
        element = self.hooks.render_paragraph(blocks[0])
        if element is None:
            return False
        blocks.pop(0)
        parent.append(element)
        return True


class FootnoteReferenceInlineProcessor(InlineProcessor):
    """Render inline ``[^ref]`` markers as superscript back-references."""

    def __init__(self, pattern: str = FOOTNOTE_REFERENCE_PATTERN) -> None:
        super().__init__(pattern)

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[Element, int, int]:
        ref = m.group(1)
        sup = etree.Element("sup", {"id": f"fnref:{ref}"})
        link = etree.SubElement(sup, "a", {"href": f"#fn:{ref}"})
        link.text = AtomicString(ref)
        return sup, m.start(0), m.end(0)


class SuperscriptTreeprocessor(Treeprocessor):
    """Raise the first ``<digits>^<digits>`` exponent of each text node."""

    def __init__(self, md: Markdown, hooks: RenderHooks) -> None:
        super().__init__(md)
        self.hooks = hooks

    def run(self, root: Element) -> Element:
        for element in list(root.iter()):
            if element.tag in SKIP_TEXT_TAGS:
                continue
            children = list(element)
            split = self._split(element.text)
            if split is not None:
                element.text, sup = split
                element.insert(0, sup)
            for child in children:
                split = self._split(child.tail)
                if split is None:
                    continue
                child.tail, sup = split
                element.insert(list(element).index(child) + 1, sup)
        return root

    def _split(self, text: str | None) -> tuple[str, Element] | None:
        """Return the leading text and a ``sup`` carrying the rest as its tail."""
        if not text or isinstance(text, AtomicString):
            return None
        parts = self.hooks.render_text(text)
        if parts is None:
            return None
        before, exponent, after = parts
        sup = etree.Element("sup")
        sup.text = exponent
        sup.tail = after
        return before, sup


__all__ = [
    "FENCE_BLOCK_PATTERN",
    "FOOTNOTE_DEFINITION_PATTERN",
    "SUPERSCRIPT_PATTERN",
    "FootnoteBlockProcessor",
    "FootnoteReferenceInlineProcessor",
    "PlaygroundFencePreprocessor",
    "SuperscriptTreeprocessor",
]
