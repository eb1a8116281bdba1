"""Load and validate the book build configuration.

This subpackage parses the project's ``book.yaml`` file, applies defaults for
omitted keys, resolves relative paths against the configuration file, and
produces typed dataclasses (:class:`BookConfig`, :class:`AssetConfig`) that
the build driver consumes. The primary entry point is
:func:`load_book_config`.

Examples
--------
>>> from pathlib import Path
>>> from clarity_book.config import load_book_config
>>> config = load_book_config(Path("book.yaml"))  # doctest: +SKIP
>>> config.output_dir.name  # doctest: +SKIP
'build'
"""

from .loader import DEFAULT_CONFIG, build_book_config, load_book_config
from .models import AssetConfig, BookConfig, BookConfigError

__all__ = [
    "DEFAULT_CONFIG",
    "AssetConfig",
    "BookConfig",
    "BookConfigError",
    "build_book_config",
    "load_book_config",
]
