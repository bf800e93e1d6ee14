import logging
from functools import lru_cache

import markdown
from django.utils.html import escape
from markdown.treeprocessors import Treeprocessor
from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

HIGHLIGHT_STYLE = "autumn"
URL_ATTRIBUTES = ("href", "src")
UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:")


class SourceFormatter(HtmlFormatter):
    def __init__(self):
        super().__init__(
            style=HIGHLIGHT_STYLE,
            linenos="table",
            lineanchors="L",
            anchorlinenos=True,
        )


def plain(contents: str) -> str:
    return f"<pre>{escape(contents)}</pre>"


def highlight(filename: str, contents: str) -> str:
    """Render ``contents`` as highlighted HTML, or as a plain <pre> block.

    Files without a known lexer, and any failure inside Pygments, give the
    plain rendering. This never raises.
    """
    try:
        lexer = get_lexer_for_filename(filename, contents)
    except ClassNotFound:
        return plain(contents)
    try:
        return pygments_highlight(contents, lexer, SourceFormatter())
    except Exception:
        logger.warning("highlighting %s failed, showing plain text", filename, exc_info=True)
        return plain(contents)


@lru_cache(maxsize=None)
def highlight_css() -> str:
    return HtmlFormatter(style=HIGHLIGHT_STYLE).get_style_defs(".highlight")


class UnsafeMarkupTreeprocessor(Treeprocessor):
    """Drop event handler attributes and script URLs from the rendered tree."""

    def run(self, root):
        for element in root.iter():
            for name, value in list(element.items()):
                if name.lower().startswith("on"):
                    del element.attrib[name]
                elif name in URL_ATTRIBUTES and value.strip().lower().startswith(UNSAFE_SCHEMES):
                    element.set(name, "")


def make_markdown() -> markdown.Markdown:
    md = markdown.Markdown(extensions=["extra", "codehilite"])
    # raw HTML in a README is shown as text, never passed through
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    md.treeprocessors.register(UnsafeMarkupTreeprocessor(md), "unsafe_markup", 1)
    return md


def render_markdown(text: str) -> str:
    """Render README Markdown to HTML that is safe to embed in a page.

    Any failure gives the escaped source in a plain <pre> block.
    """
    try:
        return make_markdown().convert(text)
    except Exception:
        logger.warning("markdown rendering failed, showing source", exc_info=True)
        return plain(text)
