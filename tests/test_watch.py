"""Tests for the polling source watcher."""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ

import pytest

from clarity_book.config import build_book_config
from clarity_book.site import BookBuilder
from clarity_book.watch import SourceWatcher

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


@pytest.fixture
def builder(tmp_path: Path) -> BookBuilder:
    """Build a two-chapter book and return its builder."""
    source = tmp_path / "src"
    source.mkdir()
    (source / "SUMMARY.md").write_text("- [A](ch01-00-a.md)\n", encoding="utf-8")
    (source / "ch01-00-a.md").write_text("First.\n", encoding="utf-8")
    (source / "ch01-01-b.md").write_text("Second.\n", encoding="utf-8")
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "base.html").write_text(
        "<nav>@summary</nav><article>@body</article>", encoding="utf-8"
    )
    builder = BookBuilder(build_book_config({}, base_dir=tmp_path))
    builder.run()
    return builder


def _touch(path: Path, text: str | None = None) -> None:
    """Rewrite ``path`` when ``text`` is given and push its mtime forward."""
    if text is not None:
        path.write_text(text, encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))


def test_poll_without_changes(builder: BookBuilder) -> None:
    assert SourceWatcher(builder).poll() == []


def test_changed_chapter_is_rebuilt(builder: BookBuilder) -> None:
    watcher = SourceWatcher(builder)
    source = builder.config.source_dir / "ch01-01-b.md"
    _touch(source, "Second, revised.\n")

    assert watcher.poll() == [source]
    html = (builder.config.output_dir / "ch01-01-b.html").read_text(encoding="utf-8")
    assert "Second, revised." in html
    assert html.count('class="prevnext"') == 1
    assert watcher.poll() == [], "a change is only reported once"


def test_new_static_file_is_copied(builder: BookBuilder) -> None:
    watcher = SourceWatcher(builder)
    image = builder.config.source_dir / "diagram.svg"
    image.write_text("<svg/>", encoding="utf-8")

    assert watcher.poll() == [image]
    assert (builder.config.output_dir / "diagram.svg").read_text(
        encoding="utf-8"
    ) == "<svg/>"


def test_template_change_triggers_full_rebuild(
    builder: BookBuilder, mocker: MockerFixture
) -> None:
    watcher = SourceWatcher(builder)
    run = mocker.spy(builder, "run")
    rebuild = mocker.spy(builder, "rebuild")
    _touch(builder.config.template)

    assert watcher.poll() == [builder.config.template]
    run.assert_called_once_with()
    rebuild.assert_not_called()


def test_summary_change_triggers_full_rebuild(
    builder: BookBuilder, mocker: MockerFixture
) -> None:
    watcher = SourceWatcher(builder)
    run = mocker.spy(builder, "run")
    assert builder.config.summary is not None
    _touch(builder.config.summary, "- [B](ch01-01-b.md)\n")

    watcher.poll()

    run.assert_called_once_with()
    html = (builder.config.output_dir / "ch01-01-b.html").read_text(encoding="utf-8")
    assert 'class="selected"' in html


def test_failed_rebuild_is_logged_and_skipped(
    builder: BookBuilder,
    mocker: MockerFixture,
    caplog: pytest.LogCaptureFixture,
) -> None:
    watcher = SourceWatcher(builder)
    mocker.patch.object(builder, "rebuild", side_effect=PermissionError("denied"))
    _touch(builder.config.source_dir / "ch01-00-a.md")

    with caplog.at_level(logging.ERROR, logger="clarity_book.watch"):
        assert watcher.poll() == []
    assert "Unable to rebuild" in caplog.text


def test_undecodable_chapter_does_not_stop_other_rebuilds(
    builder: BookBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    """A chapter that is not valid UTF-8 is logged while other changes proceed."""
    watcher = SourceWatcher(builder)
    good = builder.config.source_dir / "ch01-00-a.md"
    bad = builder.config.source_dir / "ch01-01-b.md"
    bad.write_bytes(b"caf\xe9\n")
    _touch(bad)
    _touch(good, "First, revised.\n")

    with caplog.at_level(logging.ERROR, logger="clarity_book.watch"):
        assert watcher.poll() == [good]

    html = (builder.config.output_dir / "ch01-00-a.html").read_text(encoding="utf-8")
    assert "First, revised." in html
    assert f"Unable to rebuild {bad}" in caplog.text


def test_strict_link_failure_keeps_watching(
    builder: BookBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    """Strict relinking errors are logged for both rebuild paths."""
    builder.config = dc.replace(builder.config, strict_links=True)
    builder.config.template.write_text("<main>@body</main>", encoding="utf-8")
    watcher = SourceWatcher(builder)
    chapter = builder.config.source_dir / "ch01-00-a.md"

    with caplog.at_level(logging.ERROR, logger="clarity_book.watch"):
        _touch(chapter, "Unmarked.\n")
        assert watcher.poll() == []
        _touch(builder.config.template)
        assert watcher.poll() == []

    assert f"Unable to rebuild {chapter}" in caplog.text
    assert "Full rebuild failed" in caplog.text


def test_run_sleeps_between_polls(builder: BookBuilder, mocker: MockerFixture) -> None:
    sleep = mocker.patch("clarity_book.watch.time.sleep")
    watcher = SourceWatcher(builder)
    poll = mocker.spy(watcher, "poll")

    watcher.run(interval=0.25, max_polls=3)

    assert poll.call_count == 3
    sleep.assert_called_with(0.25)
    assert sleep.call_count == 3
