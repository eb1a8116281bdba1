"""Shared dataclasses and protocols used by the page rendering pipeline."""

from __future__ import annotations

import dataclasses as dc
import json
import typing as typ

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element


@dc.dataclass(slots=True)
class RenderOptions:
    """Per-page settings consumed by ``render_page``.

    Attributes
    ----------
    template : str
        HTML shell containing ``@title``, ``@body`` and ``@summary``
        placeholders.
    summary : str
        Markdown for the table of contents, rendered alongside the body.
    active_link : str
        Identifier of the page being rendered; matching links are marked as
        selected. ``.md`` names are normalised to ``.html``.
    title : str
        Page title substituted for ``@title``.
    pygments_style : str
        Pygments style used for highlighted code blocks.
    """

    template: str = ""
    summary: str = ""
    active_link: str = ""
    title: str = ""
    pygments_style: str = "monokai"


@dc.dataclass(frozen=True, slots=True)
class LinkTarget:
    """Result of rewriting a link: the final href and its selection state."""

    href: str
    selected: bool = False


@dc.dataclass(slots=True)
class CodeBlockOptions:
    """JSON options attached to a fenced code block's info string.

    The recognised keys drive the client-side playground. Unknown keys are
    kept in ``raw`` so they reach the browser unchanged.
    """

    raw: dict[str, typ.Any] = dc.field(default_factory=dict)

    @classmethod
    def parse(cls, payload: str | None) -> CodeBlockOptions:
        """Parse ``payload`` best-effort; invalid JSON yields empty options."""
        if not payload or not payload.strip():
            return cls()
        try:
            loaded = json.loads(payload)
        except ValueError:
            return cls()
        if not isinstance(loaded, dict):
            return cls()
        return cls(raw=loaded)

    @property
    def nonplayable(self) -> bool:
        return bool(self.raw.get("nonplayable"))

    @property
    def noneditable(self) -> bool:
        return bool(self.raw.get("noneditable"))

    @property
    def expected_output(self) -> str | None:
        return self.raw.get("expected_output")

    @property
    def hint(self) -> str | None:
        return self.raw.get("hint")

    @property
    def validation_code(self) -> str | None:
        return self.raw.get("validation_code")

    @property
    def mine_block(self) -> int | None:
        return self.raw.get("mineBlock")

    @property
    def setup(self) -> typ.Any:
        return self.raw.get("setup")

    def to_json(self) -> str:
        """Serialise the options compactly for the ``data-options`` attribute."""
        return json.dumps(self.raw, separators=(",", ":"), ensure_ascii=False)


class RenderHooks(typ.Protocol):
    """Capability set the markdown extension delegates to.

    Any object providing these four methods can be passed to
    :class:`~clarity_book.generator.renderer.BookExtension`.
    """

    def render_code_block(self, code: str, info: str) -> str:
        """Return container HTML for a fenced block with ``info`` string."""
        ...

    def render_link(self, href: str) -> LinkTarget:
        """Return the rewritten link target for ``href``."""
        ...

    def render_paragraph(self, block: str) -> Element | None:
        """Return a replacement element for ``block`` or ``None`` to skip."""
        ...

    def render_text(self, text: str) -> tuple[str, str, str] | None:
        """Split ``text`` into base, superscript and rest, or return ``None``."""
        ...


__all__ = ["CodeBlockOptions", "LinkTarget", "RenderHooks", "RenderOptions"]
