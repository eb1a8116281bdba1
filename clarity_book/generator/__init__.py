"""Utilities for rendering book chapters into HTML pages."""

from .models import CodeBlockOptions, LinkTarget, RenderHooks, RenderOptions
from .page_builder import build_page, derive_title, render_page, substitute_template
from .renderer import BookContentRenderer, BookExtension

__all__ = [
    "BookContentRenderer",
    "BookExtension",
    "CodeBlockOptions",
    "LinkTarget",
    "RenderHooks",
    "RenderOptions",
    "build_page",
    "derive_title",
    "render_page",
    "substitute_template",
]
