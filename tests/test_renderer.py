"""Tests for the markdown renderer behind every book page.

``BookContentRenderer`` wires the playground code block, link rewriting,
footnote and superscript hooks into Python-Markdown. The rendered HTML is
parsed with BeautifulSoup so assertions target the structure the browser
playground relies on rather than exact whitespace.
"""

from __future__ import annotations

import xml.etree.ElementTree as etree

import msgspec.json as msgspec_json
import pytest
from bs4 import BeautifulSoup
from markdown import Markdown

from clarity_book.generator import (
    BookContentRenderer,
    BookExtension,
    CodeBlockOptions,
    LinkTarget,
)
from clarity_book.generator.link_rewriter import rewrite_markdown_href


@pytest.fixture
def renderer() -> BookContentRenderer:
    """Return a renderer with no active page."""
    return BookContentRenderer()


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_playable_clarity_block(renderer: BookContentRenderer) -> None:
    """Clarity fences become editable, runnable playground containers."""
    html = renderer.markdown(
        '```clarity,{"expected_output":"u1","hint":"add"}\n(+ u1 u0)\n```\n'
    )
    block = _soup(html).select_one("div.code")
    assert block is not None, "expected a div.code playground container"
    assert block["data-language"] == "clarity"
    options = msgspec_json.decode(block["data-options"].encode("utf-8"))
    assert options == {"expected_output": "u1", "hint": "add"}
    assert block.select_one("button.copy") is not None
    assert block.select_one("button.reset") is not None
    assert block.select_one("button.play") is not None
    code = block.select_one("pre.language-clarity > code.language-clarity")
    assert code is not None
    assert code.has_attr("contenteditable")
    assert code["spellcheck"] == "false"
    assert code.get_text() == "(+ u1 u0)\n"


def test_code_is_highlighted(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("```clarity\n(ok u1)\n```\n")
    code = _soup(html).select_one("div.code code")
    assert code.select_one("span.k").get_text() == "ok"


def test_nonplayable_block_has_copy_only(renderer: BookContentRenderer) -> None:
    html = renderer.markdown('```clarity,{"nonplayable":true}\n(ok u1)\n```\n')
    block = _soup(html).select_one("div.code")
    assert block.select_one("button.copy") is not None
    assert block.select_one("button.play") is None
    assert block.select_one("button.reset") is None
    assert not block.select_one("code").has_attr("contenteditable")


def test_noneditable_block_keeps_play(renderer: BookContentRenderer) -> None:
    html = renderer.markdown('```clarity,{"noneditable":true}\n(ok u1)\n```\n')
    block = _soup(html).select_one("div.code")
    assert block.select_one("button.play") is not None
    assert block.select_one("button.reset") is None
    assert not block.select_one("code").has_attr("contenteditable")


def test_other_languages_are_not_playable(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("```typescript\nconst a = 1;\n```\n")
    block = _soup(html).select_one("div.code")
    assert block["data-language"] == "typescript"
    assert block["data-options"] == "{}"
    assert block.select_one("button.play") is None
    assert block.select_one("pre.language-typescript") is not None


def test_invalid_options_fall_back_to_empty(renderer: BookContentRenderer) -> None:
    """Malformed JSON options do not break rendering."""
    html = renderer.markdown("```clarity,{oops\n(ok u1)\n```\n")
    block = _soup(html).select_one("div.code")
    assert block["data-options"] == "{}"
    assert block.select_one("button.play") is not None


def test_block_without_language(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("```\nplain <text>\n```\n")
    block = _soup(html).select_one("div.code")
    assert not block.has_attr("data-language")
    assert not block.has_attr("data-options")
    assert not block.select_one("pre").has_attr("class")
    assert block.select_one("code").get_text() == "plain <text>\n"


def test_trailing_blank_lines_collapse(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("```clarity\n(ok u1)\n\n\n```\n")
    assert _soup(html).select_one("div.code code").get_text() == "(ok u1)\n"


def test_indented_fence_inside_list(renderer: BookContentRenderer) -> None:
    """Fences nested in list items render as playground blocks too."""
    html = renderer.markdown(
        "- Step one\n\n  ```clarity\n  (ok u1)\n  ```\n\n- Step two\n"
    )
    block = _soup(html).select_one("div.code")
    assert block is not None, "expected the indented fence to render"
    assert block.select_one("code").get_text() == "(ok u1)\n"


def test_markdown_links_point_at_pages(renderer: BookContentRenderer) -> None:
    html = renderer.markdown(
        "[Next](ch01-02-next.md#top) and [Docs](https://example.com/guide.md)"
    )
    links = [a["href"] for a in _soup(html).select("a")]
    assert links == ["ch01-02-next.html#top", "https://example.com/guide.md"]


@pytest.mark.parametrize("active", ["ch01-00-intro.md", "ch01-00-intro.html"])
def test_active_link_is_selected(active: str) -> None:
    renderer = BookContentRenderer(active_link=active)
    html = renderer.markdown("- [Intro](ch01-00-intro.md)\n- [Next](ch01-01-next.md)\n")
    selected = _soup(html).select("a.selected")
    assert [a["href"] for a in selected] == ["ch01-00-intro.html"]


def test_no_active_link_selects_nothing(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("[Intro](ch01-00-intro.md)")
    assert _soup(html).select("a.selected") == []


def test_footnote_reference_and_definition(renderer: BookContentRenderer) -> None:
    html = renderer.markdown(
        "Smart contracts[^1] are neat.\n\n[^1] Clarity is decidable.\n"
    )
    soup = _soup(html)
    reference = soup.select_one("sup#fnref\\:1 > a")
    assert reference is not None, "expected an inline footnote reference"
    assert reference["href"] == "#fn:1"
    assert reference.get_text() == "1"

    footnote = soup.select_one("div.footnote")
    assert footnote is not None, "expected a footnote definition block"
    assert footnote.select_one("sup").get("id") == "fn:1"
    assert "Clarity is decidable." in footnote.get_text()
    backref = footnote.select_one("a")
    assert backref["href"] == "#fnref:1"
    assert backref.get_text() == "↵"


def test_bracket_caret_link_is_not_a_footnote(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("[^x](https://example.com)")
    soup = _soup(html)
    assert soup.select("sup") == []
    assert soup.select_one("a")["href"] == "https://example.com"


def test_first_exponent_is_superscripted(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("The space has 2^128 keys and 10^6 more.")
    paragraph = _soup(html).select_one("p")
    assert [sup.get_text() for sup in paragraph.select("sup")] == ["128"]
    assert paragraph.get_text() == "The space has 2128 keys and 10^6 more."


def test_inline_code_is_not_superscripted(renderer: BookContentRenderer) -> None:
    html = renderer.markdown("`2^8` and 3^4")
    paragraph = _soup(html).select_one("p")
    assert paragraph.select_one("code").get_text() == "2^8"
    assert [sup.get_text() for sup in paragraph.select("sup")] == ["4"]


def test_blank_markdown_renders_empty(renderer: BookContentRenderer) -> None:
    assert renderer.markdown("  \n") == ""


def test_stylesheet_targets_code_class(renderer: BookContentRenderer) -> None:
    assert ".code" in renderer.stylesheet


class _StubHooks:
    """Minimal alternative rendering strategy."""

    def render_code_block(self, code: str, info: str) -> str:
        return f'<div class="stub">{info}</div>\n'

    def render_link(self, href: str) -> LinkTarget:
        return LinkTarget("/elsewhere", selected=True)

    def render_paragraph(self, block: str) -> etree.Element | None:
        return None

    def render_text(self, text: str) -> tuple[str, str, str] | None:
        return None


def test_extension_accepts_any_hooks() -> None:
    """The markdown extension delegates every decision to its hooks."""
    md = Markdown(extensions=[BookExtension(_StubHooks())])
    html = md.convert("```lisp\n(a)\n```\n\n[x](y.md) and 2^3\n")
    soup = _soup(html)
    assert soup.select_one("div.stub").get_text() == "lisp"
    link = soup.select_one("a")
    assert link["href"] == "/elsewhere"
    assert link["class"] == ["selected"]
    assert soup.select("sup") == []


def test_code_block_options_expose_playground_keys() -> None:
    options = CodeBlockOptions.parse(
        '{"mineBlock":2,"hint":"h","expected_output":"(ok u1)",'
        '"validation_code":"(asserts! true (err u1))","setup":["(ok u0)"]}'
    )
    assert options.mine_block == 2
    assert options.hint == "h"
    assert options.expected_output == "(ok u1)"
    assert options.validation_code == "(asserts! true (err u1))"
    assert options.setup == ["(ok u0)"]
    assert not options.nonplayable


def test_code_block_options_default_to_none() -> None:
    options = CodeBlockOptions.parse("[1, 2]")
    assert options.raw == {}
    assert options.hint is None
    assert options.mine_block is None


@pytest.mark.parametrize(
    ("href", "expected"),
    [
        ("foo.md#bar", "foo.html#bar"),
        ("foo.md", "foo.html"),
        ("https://example.com/x.md", "https://example.com/x.md"),
        ("HTTP://example.com/x.md", "HTTP://example.com/x.md"),
        ("notes.txt", "notes.txt"),
    ],
)
def test_rewrite_markdown_href(href: str, expected: str) -> None:
    """External links keep their target whatever the scheme's case."""
    assert rewrite_markdown_href(href) == expected
