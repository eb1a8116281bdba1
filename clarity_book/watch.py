"""Rebuild book pages when their sources change.

:class:`SourceWatcher` polls modification times under the source directory.
Changed markdown files are re-rendered and relinked, other files are copied
again, and a change to the page shell or the summary triggers a full rebuild
because every page embeds both. A failure to rebuild one file is logged and
does not stop the watcher.
"""

from __future__ import annotations

import logging
import time
import typing as typ

from .linker import ChapterLinkError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .site import BookBuilder

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.5
REBUILD_ERRORS = (OSError, UnicodeDecodeError, ChapterLinkError)


class SourceWatcher:
    """Poll the source tree and rebuild files whose contents changed."""

    def __init__(self, builder: BookBuilder) -> None:
        self.builder = builder
        self._mtimes = self._snapshot()

    def poll(self) -> list[Path]:
        """Rebuild whatever changed since the previous poll.

        Returns
        -------
        list[Path]
            Source files that were rebuilt successfully.
        """
        current = self._snapshot()
        changed = [
            path
            for path, mtime in current.items()
            if self._mtimes.get(path) != mtime
        ]
        self._mtimes = current
        if not changed:
            return []

        if any(self._is_shared_input(path) for path in changed):
            logger.info("Shared page input changed; rebuilding everything")
            try:
                self.builder.run()
            except REBUILD_ERRORS:
                logger.exception("Full rebuild failed")
                return []
            return changed

        rebuilt: list[Path] = []
        for path in changed:
            logger.info("Rebuilding %s", path)
            try:
                self.builder.rebuild(path)
            except REBUILD_ERRORS:
                logger.exception("Unable to rebuild %s", path)
                continue
            rebuilt.append(path)
        return rebuilt

    def run(
        self, interval: float = DEFAULT_INTERVAL, max_polls: int | None = None
    ) -> None:
        """Poll every ``interval`` seconds, forever unless ``max_polls`` is set."""
        polls = 0
        while max_polls is None or polls < max_polls:
            self.poll()
            polls += 1
            time.sleep(interval)

    def _snapshot(self) -> dict[Path, int]:
        """Return modification times for every watched file."""
        watched = list(self.builder.source_files())
        template = self.builder.config.template
        if template.exists():
            watched.append(template)
        snapshot: dict[Path, int] = {}
        for path in watched:
            try:
                snapshot[path] = path.stat().st_mtime_ns
            except FileNotFoundError:
                continue
        return snapshot

    def _is_shared_input(self, path: Path) -> bool:
        config = self.builder.config
        return path == config.template or path == config.summary


__all__ = ["DEFAULT_INTERVAL", "SourceWatcher"]
