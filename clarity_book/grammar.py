r"""Clarity grammar table and tokenizer used for syntax highlighting.

The grammar is an ordered tuple of :class:`GrammarRule` records. Rules are
applied one after another to whatever text earlier rules left unclassified, so
the table order is the priority order: comments win over strings, strings over
symbols, and so on down to punctuation. Greedy rules may start inside
unclassified text and extend across tokens matched by earlier rules, which is
how a ``;;`` inside a string literal stays part of the string.

:class:`ClarityLexer` adapts the tokenizer to Pygments so the regular
``HtmlFormatter`` can render highlighted markup.

Examples
--------
>>> from clarity_book.grammar import tokenize
>>> [(span.text, span.name) for span in tokenize("(ok u1)")]
[('(', 'punctuation'), ('ok', 'keyword'), (' ', None), ('u1', 'number'), (')', 'punctuation')]
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from pygments.lexer import Lexer
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pygments.token import _TokenType

OPEN_PAREN = r"(\()"
KEYWORD_END = r"(?=[\s)])"
PRIMITIVE_START = r"(^|[\s(\[])"
PRIMITIVE_END = r"(?=[\s)]|$)"
ADDRESS_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

CONTROL_FORMS = (
    "or",
    "and",
    "xor",
    "not",
    "begin",
    "let",
    "if",
    "ok",
    "err",
    "unwrap!",
    "unwrap-err!",
    "unwrap-panic",
    "unwrap-err-panic",
    "match",
    "try!",
    "asserts!",
    "map-get?",
    "var-get",
    "contract-map-get?",
    "get",
    "tuple",
    "define-public",
    "define-private",
    "define-constant",
    "define-map",
    "define-data-var",
    "define-fungible-token",
    "define-non-fungible-token",
    "define-read-only",
)
PREDICATE_FORMS = ("is-eq", "is-some", "is-none", "is-ok", "is-err")
MUTATION_FORMS = (
    "var-set",
    "map-set",
    "map-delete",
    "map-insert",
    "ft-transfer?",
    "nft-transfer?",
    "nft-mint?",
    "ft-mint?",
    "nft-get-owner?",
    "ft-get-balance?",
    "contract-call?",
)
COLLECTION_FORMS = (
    "list",
    "map",
    "filter",
    "fold",
    "len",
    "concat",
    "append",
    "as-max-len?",
    "to-int",
    "to-uint",
    "buff",
    "hash160",
    "sha256",
    "sha512",
    "sha512/256",
    "keccak256",
    "true",
    "false",
    "none",
)
ENVIRONMENT_FORMS = (
    "as-contract",
    "contract-caller",
    "tx-sender",
    "block-height",
    "at-block",
    "get-block-info?",
)


@dc.dataclass(frozen=True, slots=True)
class GrammarRule:
    """One pattern-to-token-class entry of a grammar table.

    Attributes
    ----------
    name : str
        Token class name (``"comment"``, ``"keyword"``, ...).
    pattern : re.Pattern[str]
        Compiled expression matched against raw text.
    token : _TokenType
        Pygments token type emitted for matches.
    lookbehind : bool
        When ``True`` the first capture group is a boundary prefix that is
        required for the match but left out of the token.
    greedy : bool
        When ``True`` a match starting in unclassified text may extend over
        spans already claimed by earlier rules.
    aliases : tuple[str, ...]
        Extra class names associated with the token.
    """

    name: str
    pattern: re.Pattern[str]
    token: _TokenType
    lookbehind: bool = False
    greedy: bool = False
    aliases: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class TokenSpan:
    """Slice of the source text with the rule that classified it, if any."""

    start: int
    text: str
    rule: GrammarRule | None = None

    @property
    def end(self) -> int:
        """Return the offset just past the span."""
        return self.start + len(self.text)

    @property
    def name(self) -> str | None:
        """Return the token class name or ``None`` for unclassified text."""
        return self.rule.name if self.rule else None

    @property
    def token(self) -> _TokenType:
        """Return the Pygments token type, ``Text`` when unclassified."""
        return self.rule.token if self.rule else Text


def _forms(words: cabc.Iterable[str]) -> str:
    return "(?:" + "|".join(re.escape(word) for word in words) + ")"


def _keyword_rule(words: cabc.Iterable[str]) -> GrammarRule:
    pattern = re.compile(OPEN_PAREN + _forms(words) + KEYWORD_END)
    return GrammarRule("keyword", pattern, Keyword, lookbehind=True)


CLARITY_GRAMMAR: tuple[GrammarRule, ...] = (
    GrammarRule(
        "heading",
        re.compile(r";;;.*"),
        Comment.Special,
        aliases=("comment", "title"),
    ),
    GrammarRule("comment", re.compile(r";;.*"), Comment.Single),
    GrammarRule(
        "string", re.compile(r'"(?:[^"\\]|\\.)*"'), String.Double, greedy=True
    ),
    GrammarRule("string", re.compile(r"0x[0-9a-fA-F]*"), String.Other, greedy=True),
    GrammarRule(
        "address",
        re.compile(r"([\s()])('[" + ADDRESS_ALPHABET + r"]{28,41})(?=[()\s]|$)"),
        Name.Constant,
        lookbehind=True,
    ),
    GrammarRule("symbol", re.compile(r"'[^()#'\s]+"), String.Symbol, greedy=True),
    _keyword_rule(CONTROL_FORMS),
    _keyword_rule(PREDICATE_FORMS),
    _keyword_rule(MUTATION_FORMS),
    _keyword_rule(COLLECTION_FORMS),
    _keyword_rule(ENVIRONMENT_FORMS),
    GrammarRule(
        "boolean",
        re.compile(PRIMITIVE_START + r"(?:false|true|none)" + PRIMITIVE_END),
        Keyword.Constant,
        lookbehind=True,
    ),
    GrammarRule(
        "number",
        re.compile(PRIMITIVE_START + r"-?u?\d+" + PRIMITIVE_END),
        Number.Integer,
        lookbehind=True,
    ),
    GrammarRule(
        "operator",
        re.compile(OPEN_PAREN + r"(?:[-+*/]|[<>]=?|=>?)(?=[()\s]|$)"),
        Operator,
        lookbehind=True,
    ),
    GrammarRule(
        "function",
        re.compile(OPEN_PAREN + r"[^()'\s]+(?=[()\s]|$)"),
        Name.Function,
        lookbehind=True,
    ),
    GrammarRule("punctuation", re.compile(r"[()']"), Punctuation),
)


def _match_bounds(rule: GrammarRule, match: re.Match[str]) -> tuple[int, int]:
    """Return the token start and end for ``match``, skipping any lookbehind."""
    start = match.start()
    if rule.lookbehind and match.lastindex:
        start = match.end(1)
    return start, match.end()


def _apply_rule(
    rule: GrammarRule, spans: list[TokenSpan], text: str
) -> list[TokenSpan]:
    """Classify every match of ``rule`` inside the unclassified spans."""
    result: list[TokenSpan] = []
    index = 0
    while index < len(spans):
        span = spans[index]
        index += 1
        if span.rule is not None or not span.text:
            result.append(span)
            continue

        if rule.greedy:
            match = rule.pattern.search(text, span.start)
            offset = 0
        else:
            match = rule.pattern.search(span.text)
            offset = span.start
        if match is None:
            result.append(span)
            continue

        start, end = _match_bounds(rule, match)
        start += offset
        end += offset
        if start >= span.end or end <= start:
            result.append(span)
            continue

        # A greedy match swallows every span it reaches into.
        last = span
        while end > last.end and index < len(spans):
            last = spans[index]
            index += 1
        end = min(end, last.end)

        if start > span.start:
            result.append(TokenSpan(span.start, text[span.start : start]))
        result.append(TokenSpan(start, text[start:end], rule))
        if end < last.end:
            # The remainder goes back through the loop for further matches.
            index -= 1
            spans[index] = TokenSpan(end, text[end : last.end])
    return result


def tokenize(
    text: str, grammar: cabc.Sequence[GrammarRule] = CLARITY_GRAMMAR
) -> list[TokenSpan]:
    """Split ``text`` into classified and unclassified spans.

    Parameters
    ----------
    text : str
        Raw source text; no prior tokenization is assumed.
    grammar : Sequence[GrammarRule], optional
        Ordered rule table, defaulting to :data:`CLARITY_GRAMMAR`.

    Returns
    -------
    list[TokenSpan]
        Spans covering ``text`` end to end. Text no rule matched is returned
        with ``rule=None``; tokenizing never fails.
    """
    spans = [TokenSpan(0, text)]
    for rule in grammar:
        spans = _apply_rule(rule, spans, text)
    return [span for span in spans if span.text]


class ClarityLexer(Lexer):
    """Pygments lexer for Clarity backed by :data:`CLARITY_GRAMMAR`."""

    name = "Clarity"
    aliases = ["clarity"]  # noqa: RUF012 - Pygments API
    filenames = ["*.clar"]  # noqa: RUF012 - Pygments API
    mimetypes = ["text/x-clarity"]  # noqa: RUF012 - Pygments API

    def get_tokens_unprocessed(  # type: ignore[override]
        self, text: str
    ) -> cabc.Iterator[tuple[int, _TokenType, str]]:
        """Yield ``(offset, token, value)`` triples for Pygments formatters."""
        for span in tokenize(text):
            yield span.start, span.token, span.text


__all__ = [
    "CLARITY_GRAMMAR",
    "ClarityLexer",
    "GrammarRule",
    "TokenSpan",
    "tokenize",
]
