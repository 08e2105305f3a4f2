"""Turn inline HTML into styled runs and Notion rich_text arrays.

The tokenizer only understands the flat inline tags a Markdown renderer
emits for emphasis: ``<strong>``, ``<em>``, ``<code>``, ``<del>`` and
``<s>``.  Each becomes one :class:`~mdnotion.models.RichTextRun` with a
single style flag.  Nested formatting is flattened into the outer style.

A rich_text segment is a dict of the form::

    {
        "type": "text",
        "text": {"content": "hello"},
        "annotations": {"bold": true, "italic": false, "strikethrough": false,
                         "underline": false, "code": false, "color": "default"}
    }

``annotations`` is omitted when every flag is at its default.
"""

from __future__ import annotations

import html as _html
import re
from collections.abc import Iterable

from mdnotion.models import RichTextRun, TextStyle
from mdnotion.utils.text_split import split_string

# Lowercased opening tag -> (closing tag pattern, style).  Both ends match
# case-insensitively, but otherwise literally: ``<code class="x">`` is not
# an opener.
_STYLE_TAGS: dict[str, tuple[re.Pattern[str], TextStyle]] = {
    f"<{name}>": (re.compile(f"</{name}>", re.IGNORECASE), style)
    for name, style in (
        ("strong", TextStyle.BOLD),
        ("em", TextStyle.ITALIC),
        ("code", TextStyle.CODE),
        ("del", TextStyle.STRIKETHROUGH),
        ("s", TextStyle.STRIKETHROUGH),
    )
}

_BREAK_TAG_RE = re.compile(r"^<br\s*/?>$", re.IGNORECASE)

_TAG_RE = re.compile(r"<[^>]*>")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

def strip_tags(fragment: str) -> str:
    """Remove every HTML tag from *fragment* and decode entities."""
    return _html.unescape(_TAG_RE.sub("", fragment))


def tokenize_inline(fragment: str) -> list[RichTextRun]:
    """Split an inline HTML fragment into styled runs.

    Parameters
    ----------
    fragment:
        Inline HTML with no block-level tags, e.g. the inside of a
        ``<p>`` or ``<li>``.

    Returns
    -------
    list[RichTextRun]
        Runs in source order.  Adjacent runs with the same style are not
        merged.  If nothing could be extracted the whole fragment comes
        back as one plain run, untouched.
    """
    runs: list[RichTextRun] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            runs.append(RichTextRun(_html.unescape("".join(pending))))
            pending.clear()

    i = 0
    length = len(fragment)
    while i < length:
        ch = fragment[i]
        if ch != "<":
            pending.append(ch)
            i += 1
            continue

        tag_end = fragment.find(">", i)
        if tag_end == -1:
            # A stray "<" with nothing to close it is just text.
            pending.append(ch)
            i += 1
            continue

        tag = fragment[i : tag_end + 1]
        i = tag_end + 1

        if _BREAK_TAG_RE.match(tag):
            pending.append("\n")
            continue

        flush()

        style_tag = _STYLE_TAGS.get(tag.lower())
        if style_tag is None:
            continue
        closer, style = style_tag
        close = closer.search(fragment, i)
        if close is None:
            continue
        runs.append(RichTextRun(strip_tags(fragment[i : close.start()]), frozenset({style})))
        i = close.end()

    flush()

    if not runs:
        return [RichTextRun(fragment)]
    return runs


# ---------------------------------------------------------------------------
# Notion rendering
# ---------------------------------------------------------------------------

def _default_annotations() -> dict:
    """Return a fresh default Notion annotations dict."""
    return {
        "bold": False,
        "italic": False,
        "strikethrough": False,
        "underline": False,
        "code": False,
        "color": "default",
    }


def runs_to_rich_text(runs: Iterable[RichTextRun]) -> list[dict]:
    """Render styled runs as a Notion rich_text array."""
    segments: list[dict] = []
    for run in runs:
        annotations = _default_annotations()
        for style in run.styles:
            annotations[style.value] = True
        annotations["color"] = run.color
        segments.append(_make_text_segment(run.text, annotations))
    return segments


def split_rich_text(segments: list[dict], limit: int = 2000) -> list[dict]:
    """Split any rich_text segment with content > limit into multiple segments.

    Preserves annotations on each split segment.  Never splits multi-byte
    characters (relies on :func:`split_string` which operates on Python
    code-points).

    Parameters
    ----------
    segments:
        List of Notion rich_text segment dicts.
    limit:
        Maximum character count per segment content.

    Returns
    -------
    list[dict]
        A new list where every segment's content is at most *limit* chars.
    """
    output: list[dict] = []

    for segment in segments:
        content = segment.get("text", {}).get("content", "")

        if len(content) <= limit:
            output.append(segment)
            continue

        for chunk in split_string(content, limit):
            output.append(_clone_text_segment(segment, chunk))

    return output


def _make_text_segment(content: str, annotations: dict) -> dict:
    """Create a single Notion rich_text text segment."""
    seg: dict = {
        "type": "text",
        "text": {"content": content},
    }
    # Only include annotations if any are non-default
    if _has_non_default_annotations(annotations):
        seg["annotations"] = dict(annotations)
    return seg


def _has_non_default_annotations(annotations: dict) -> bool:
    """Check if any annotation deviates from default values."""
    return (
        annotations.get("bold", False)
        or annotations.get("italic", False)
        or annotations.get("strikethrough", False)
        or annotations.get("underline", False)
        or annotations.get("code", False)
        or annotations.get("color", "default") != "default"
    )


def _clone_text_segment(segment: dict, new_content: str) -> dict:
    """Clone a text segment with new content, preserving annotations."""
    new_seg: dict = {
        "type": "text",
        "text": {"content": new_content},
    }
    if "annotations" in segment:
        new_seg["annotations"] = dict(segment["annotations"])
    return new_seg
