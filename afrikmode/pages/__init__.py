"""Static HTML pages served by the API."""

from afrikmode.pages.root import render_root_page

__all__ = ["render_root_page"]
