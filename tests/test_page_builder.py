"""Tests for page titles, template substitution and single-page rendering."""

from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup

from clarity_book.generator import (
    RenderOptions,
    build_page,
    derive_title,
    render_page,
    substitute_template,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

TEMPLATE = "<title>@title</title><nav>@summary</nav><article>@body</article>"
SUMMARY = "- [Intro](ch01-00-intro.md)\n- [Next](ch01-01-next.md)\n"


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("ch01-02-getting-started.md", "Getting Started"),
        ("ch10-00-best-practices.html", "Best Practices"),
        ("title-page.md", "Title Page"),
        ("appendix", "Appendix"),
    ],
)
def test_derive_title(filename: str, expected: str) -> None:
    assert derive_title(filename) == expected


def test_substitute_template_leaves_unknown_words() -> None:
    result = substitute_template("@title by @author", {"title": "Clarity"})
    assert result == "Clarity by @author"


@pytest.mark.parametrize(
    ("template", "fields"),
    [
        ("<p>plain a@ b</p>", {}),
        ("@unknown", {}),
        ("<p>no placeholders</p>", {"title": "Ignored"}),
    ],
)
def test_substitute_template_without_known_words_is_unchanged(
    template: str, fields: dict[str, str]
) -> None:
    assert substitute_template(template, fields) == template


def test_substitute_template_is_not_recursive() -> None:
    """Substituted values are never scanned for further placeholders."""
    result = substitute_template("@title", {"title": "@body", "body": "x"})
    assert result == "@body"


def test_substitute_template_accepts_empty_values() -> None:
    assert substitute_template("[@summary]", {"summary": ""}) == "[]"


def test_render_page_fills_every_placeholder() -> None:
    options = RenderOptions(
        template=TEMPLATE,
        summary=SUMMARY,
        active_link="ch01-00-intro.md",
        title="Intro",
    )
    soup = BeautifulSoup(
        render_page("# Welcome\n\nHello.\n", options), "html.parser"
    )
    assert soup.title.get_text() == "Intro"
    assert soup.select_one("article h1").get_text() == "Welcome"
    nav_links = soup.select("nav a")
    assert [a["href"] for a in nav_links] == [
        "ch01-00-intro.html",
        "ch01-01-next.html",
    ]
    assert [a["href"] for a in soup.select("nav a.selected")] == [
        "ch01-00-intro.html"
    ]


def test_pages_render_independently() -> None:
    """The active link is scoped to one page, whatever the render order."""
    first = RenderOptions(template="@summary", summary=SUMMARY, active_link="ch01-00-intro.md")
    second = RenderOptions(template="@summary", summary=SUMMARY, active_link="ch01-01-next.md")

    before = render_page("", first)
    render_page("", second)
    after = render_page("", first)

    assert before == after
    selected = BeautifulSoup(render_page("", second), "html.parser").select("a.selected")
    assert [a["href"] for a in selected] == ["ch01-01-next.html"]


def test_build_page_derives_title_and_active_link(tmp_path: Path) -> None:
    source = tmp_path / "ch01-00-intro.md"
    source.write_text("Intro body.\n", encoding="utf-8")
    options = RenderOptions(template=TEMPLATE, summary=SUMMARY)

    soup = BeautifulSoup(build_page(source, options), "html.parser")

    assert soup.title.get_text() == "Intro"
    assert soup.select_one("article p").get_text() == "Intro body."
    assert [a["href"] for a in soup.select("a.selected")] == ["ch01-00-intro.html"]


def test_build_page_propagates_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        build_page(tmp_path / "missing.md", RenderOptions(template=TEMPLATE))
