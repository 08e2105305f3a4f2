"""Split rendered HTML into a flat list of classified elements.

The HTML this module sees comes from a Markdown renderer, which puts
every block element on its own line.  The exceptions are code blocks and
table rows (one cell per line), which a pre-pass folds onto a single
line.  After that, each line is matched against an ordered list of rules
and the first match decides what the line is.  There is no DOM and no
recursion.

Code block bodies are kept on one line by replacing newlines with the
two characters ``\\n``.  Backslashes already present in the body are
first encoded as ``&#92;`` so that source code containing a literal
``\\n`` survives the round trip.  :func:`unescape_code` reverses both.
"""

from __future__ import annotations

import html as _html
import re
from collections.abc import Callable

from mdnotion.converter.languages import PLAIN_TEXT, normalize_language
from mdnotion.converter.rich_text import strip_tags
from mdnotion.models import ElementTag, ScannedElement

NEWLINE_ESCAPE = "\\n"

_BACKSLASH_ENTITY = "&#92;"

_CODE_SPAN_RE = re.compile(r"<pre><code([^>]*)>([\s\S]*?)</code></pre>")
_TABLE_ROW_SPAN_RE = re.compile(r"<tr(?:\s[^>]*)?>[\s\S]*?</tr>")

_IMG_RE = re.compile(r"<img\s+([^>]*?)\s*/?>")
_ATTR_RE = re.compile(r"""([\w-]+)=(["'])(.*?)\2""")
_HEADING_RE = re.compile(r"<h([1-6])(?:\s[^>]*)?>(.*?)</h\1>")
_CODE_RE = re.compile(r'<pre><code(?:\s+class="([^"]*)")?>(.*?)</code></pre>')
_LANGUAGE_CLASS_RE = re.compile(r"(?:^|\s)language-(\S+)")
_BLOCKQUOTE_RE = re.compile(r"<blockquote>(.*?)</blockquote>")
_LIST_ITEM_RE = re.compile(r"<li(?:\s[^>]*)?>(.*?)</li>")
_TABLE_ROW_RE = re.compile(r"<tr(?:\s[^>]*)?>(.*?)</tr>")
_TABLE_CELL_RE = re.compile(r"<t[hd](?:\s[^>]*)?>(.*?)</t[hd]>")
_TABLE_STRUCTURE_RE = re.compile(r"</?(?:table|thead|tbody)>")
_PARAGRAPH_RE = re.compile(r"<p>(.*?)</p>")


# ---------------------------------------------------------------------------
# Pre-pass
# ---------------------------------------------------------------------------

def _fold_code_block(match: re.Match[str]) -> str:
    attrs, body = match.group(1), match.group(2)
    body = body.replace("\\", _BACKSLASH_ENTITY).replace("\n", NEWLINE_ESCAPE)
    return f"<pre><code{attrs}>{body}</code></pre>"


def _fold_table_row(match: re.Match[str]) -> str:
    return "".join(line.strip() for line in match.group(0).splitlines())


def fold_multiline_elements(html: str) -> str:
    """Collapse code blocks and table rows onto one line each."""
    html = _CODE_SPAN_RE.sub(_fold_code_block, html)
    return _TABLE_ROW_SPAN_RE.sub(_fold_table_row, html)


def unescape_code(body: str) -> str:
    """Reverse the pre-pass escaping and decode HTML entities."""
    return _html.unescape(body.replace(NEWLINE_ESCAPE, "\n"))


def parse_attributes(raw: str) -> dict[str, str]:
    """Parse ``name="value"`` pairs out of the inside of a tag."""
    return {name: value for name, _quote, value in _ATTR_RE.findall(raw)}


# ---------------------------------------------------------------------------
# Line rules
# ---------------------------------------------------------------------------

# A rule returns ``None`` when it does not apply to the line, the empty
# list when it applies and the line should be dropped, and a one-element
# list otherwise.
_Rule = Callable[[str], "list[ScannedElement] | None"]


def _image_rule(line: str) -> list[ScannedElement] | None:
    m = _IMG_RE.search(line)
    if m is None:
        return None
    return [ScannedElement(ElementTag.IMAGE, "", parse_attributes(m.group(1)))]


def _heading_rule(line: str) -> list[ScannedElement] | None:
    m = _HEADING_RE.search(line)
    if m is None:
        return None
    return [ScannedElement(ElementTag(f"h{m.group(1)}"), m.group(2))]


def _code_rule(line: str) -> list[ScannedElement] | None:
    m = _CODE_RE.search(line)
    if m is None:
        return None
    language = PLAIN_TEXT
    if m.group(1):
        cls = _LANGUAGE_CLASS_RE.search(m.group(1))
        language = cls.group(1) if cls else m.group(1)
    return [
        ScannedElement(
            ElementTag.CODE,
            m.group(2),
            {"language": normalize_language(language)},
        )
    ]


def _blockquote_rule(line: str) -> list[ScannedElement] | None:
    m = _BLOCKQUOTE_RE.search(line)
    if m is None:
        return None
    return [ScannedElement(ElementTag.BLOCKQUOTE, m.group(1))]


def _list_item_rule(line: str) -> list[ScannedElement] | None:
    m = _LIST_ITEM_RE.search(line)
    if m is None:
        return None
    return [ScannedElement(ElementTag.LIST_ITEM, m.group(1))]


def _table_row_rule(line: str) -> list[ScannedElement] | None:
    m = _TABLE_ROW_RE.search(line)
    if m is None:
        return None
    cells = [strip_tags(cell).strip() for cell in _TABLE_CELL_RE.findall(m.group(1))]
    if not cells:
        return []
    return [ScannedElement(ElementTag.TABLE_ROW, "", {"cells": cells})]


def _table_structure_rule(line: str) -> list[ScannedElement] | None:
    if _TABLE_STRUCTURE_RE.search(line) is None:
        return None
    return []


def _paragraph_rule(line: str) -> list[ScannedElement] | None:
    m = _PARAGRAPH_RE.search(line)
    if m is None:
        return None
    if not m.group(1).strip():
        return []
    return [ScannedElement(ElementTag.PARAGRAPH, m.group(1))]


def _bare_text_rule(line: str) -> list[ScannedElement] | None:
    if line.startswith("<") or line.endswith(">"):
        return None
    return [ScannedElement(ElementTag.PARAGRAPH, line)]


LINE_RULES: tuple[_Rule, ...] = (
    _image_rule,
    _heading_rule,
    _code_rule,
    _blockquote_rule,
    _list_item_rule,
    _table_row_rule,
    _table_structure_rule,
    _paragraph_rule,
    _bare_text_rule,
)
"""Line classification rules in priority order; the first match wins."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def classify_line(line: str) -> list[ScannedElement]:
    """Classify one trimmed, non-blank line.  Unmatched lines yield ``[]``."""
    for rule in LINE_RULES:
        result = rule(line)
        if result is not None:
            return result
    return []


def scan_html(html: str) -> list[ScannedElement]:
    """Scan rendered HTML into elements, in document order.

    Parameters
    ----------
    html:
        HTML produced by :class:`~mdnotion.converter.html_render.HtmlRenderer`
        (or any renderer that keeps block elements on separate lines).

    Returns
    -------
    list[ScannedElement]
        One element per recognized line.  Table scaffolding, empty
        paragraphs and unrecognized markup produce nothing.
    """
    elements: list[ScannedElement] = []
    for raw_line in fold_multiline_elements(html).split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        elements.extend(classify_line(line))
    return elements
