"""Common literal values used across clarity_book.

These constants keep the HTML markers and file naming conventions shared by
the renderer, the chapter linker, and the build driver in one place.

Examples
--------
>>> from clarity_book import _constants
>>> bool(_constants.CHAPTER_FILE_PATTERN.match("ch01-02-getting-started.html"))
True
>>> bool(_constants.CHAPTER_FILE_PATTERN.match("title-page.html"))
False
"""

import re

FOOTNOTE_MARKER = '<div class="footnote">'
ARTICLE_CLOSE_MARKER = "</article>"
CHAPTER_FILE_PATTERN = re.compile(r"^ch[0-9]+-[0-9]+-\S+\.html$")
