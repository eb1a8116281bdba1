"""Static site generator for the Clarity smart-contract book.

This package exposes the CLI entry points used by the ``book`` console script
to render markdown chapters into HTML pages with playground code blocks and
previous/next chapter navigation.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from clarity_book import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
