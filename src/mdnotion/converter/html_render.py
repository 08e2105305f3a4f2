"""Render Markdown to the intermediate HTML consumed by the scanner.

:class:`HtmlRenderer` wraps a single mistune v3 HTML renderer configured
once from an immutable :class:`MarkdownOptions`.  The renderer is never
reconfigured after construction, so one instance can serve any number of
concurrent conversions.

If mistune raises, :func:`fallback_markdown_to_html` takes over.  It only
knows headings, emphasis, code, images, links and paragraphs, but it
never fails, so the pipeline always has some HTML to work with.
"""

from __future__ import annotations

import html as _html
import re
from collections.abc import Callable
from dataclasses import dataclass

import mistune

from mdnotion.observability import get_logger

log = get_logger("mdnotion.converter")

_PRE_SPAN_RE = re.compile(r"<pre>[\s\S]*?</pre>")


@dataclass(frozen=True)
class MarkdownOptions:
    """Fixed configuration of the Markdown renderer.

    Parameters
    ----------
    tables:
        GitHub-style pipe tables.
    strikethrough:
        ``~~text~~`` as ``<del>``.
    task_lists:
        ``- [ ] item`` list items.
    autolink:
        Bare ``https://`` URLs become links.
    hard_wrap:
        A single newline inside a paragraph is a line break.
    escape_html:
        Escape raw HTML found in the Markdown instead of passing it
        through.
    """

    tables: bool = True
    strikethrough: bool = True
    task_lists: bool = True
    autolink: bool = True
    hard_wrap: bool = True
    escape_html: bool = False

    def plugins(self) -> list[str]:
        enabled = [
            ("table", self.tables),
            ("strikethrough", self.strikethrough),
            ("task_lists", self.task_lists),
            ("url", self.autolink),
        ]
        return [name for name, on in enabled if on]


class HtmlRenderer:
    """Markdown to HTML with cleanup and a never-failing fallback.

    Examples
    --------
    >>> renderer = HtmlRenderer()
    >>> renderer.render("# Hello")
    '<h1>Hello</h1>'
    """

    def __init__(self, options: MarkdownOptions | None = None) -> None:
        self._options = options or MarkdownOptions()
        self._markdown = mistune.create_markdown(
            escape=self._options.escape_html,
            hard_wrap=self._options.hard_wrap,
            renderer="html",
            plugins=self._options.plugins(),
        )

    @property
    def options(self) -> MarkdownOptions:
        return self._options

    def render(self, markdown: str) -> str:
        """Render *markdown* to cleaned-up HTML."""
        try:
            html = self._markdown(markdown)
        except Exception as exc:
            log.warning(
                "Markdown renderer failed, using fallback",
                extra={"extra_fields": {"op": "render", "error": repr(exc)}},
            )
            return fallback_markdown_to_html(markdown)

        html = cleanup_html(str(html))
        log.debug(
            "Markdown rendered to HTML",
            extra={"extra_fields": {"op": "render", "html_length": len(html)}},
        )
        return html


# ---------------------------------------------------------------------------
# Cleanup
# ---------------------------------------------------------------------------

def _outside_code(html: str, fn: Callable[[str], str]) -> str:
    """Apply *fn* to every part of *html* that is not a ``<pre>`` span."""
    parts: list[str] = []
    pos = 0
    for m in _PRE_SPAN_RE.finditer(html):
        parts.append(fn(html[pos:m.start()]))
        parts.append(m.group(0))
        pos = m.end()
    parts.append(fn(html[pos:]))
    return "".join(parts)


def _cleanup_segment(segment: str) -> str:
    segment = re.sub(r"\n\s*\n", "\n", segment)
    segment = re.sub(r"<p>\s*</p>", "", segment)
    # Hard breaks stay inside their paragraph line.
    segment = re.sub(r"<br\s*/?>\n", "<br />", segment)
    segment = re.sub(r"<img([^>]*?)\s*/?>", r"<img\1 />", segment)
    segment = re.sub(
        r"<blockquote>\s*<p>([^\n]*?)</p>\s*</blockquote>",
        r"<blockquote>\1</blockquote>",
        segment,
    )
    # Loose list items wrap their text in a paragraph.
    segment = re.sub(
        r"<li(\s[^>]*)?>\s*<p>([^\n]*?)</p>\s*</li>",
        r"<li\1>\2</li>",
        segment,
    )
    return segment


def cleanup_html(html: str) -> str:
    """Normalize renderer output for line scanning.

    Collapses blank lines, drops empty paragraphs, keeps hard line breaks
    on their paragraph's line, makes ``<img>`` self-closing and folds a
    blockquote or list item holding one paragraph onto one line.  Code
    blocks are left untouched.
    """
    return _outside_code(html, _cleanup_segment).strip()


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------

_FENCE_RE = re.compile(r"```([^\n`]*)\n([\s\S]*?)```")
_FALLBACK_HEADING_RE = re.compile(r"^(#{1,3})\s+(.*)$")


def _fallback_inline(text: str) -> str:
    text = _html.escape(text, quote=False)
    text = re.sub(r"!\[([^\]]*)\]\(([^)]+)\)", r'<img src="\2" alt="\1" />', text)
    text = re.sub(r"\[([^\]]+)\]\(([^)]+)\)", r'<a href="\2">\1</a>', text)
    text = re.sub(r"\*\*(.*?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"\*(.*?)\*", r"<em>\1</em>", text)
    text = re.sub(r"`(.*?)`", r"<code>\1</code>", text)
    return text


def _fallback_text(text: str) -> list[str]:
    out: list[str] = []
    for chunk in re.split(r"\n\s*\n", text):
        paragraph: list[str] = []
        for line in chunk.strip().split("\n"):
            heading = _FALLBACK_HEADING_RE.match(line)
            if heading is None:
                if line.strip():
                    paragraph.append(_fallback_inline(line.strip()))
                continue
            if paragraph:
                out.append(f"<p>{'<br />'.join(paragraph)}</p>")
                paragraph = []
            level = len(heading.group(1))
            out.append(f"<h{level}>{_fallback_inline(heading.group(2).strip())}</h{level}>")
        if paragraph:
            out.append(f"<p>{'<br />'.join(paragraph)}</p>")
    return out


def fallback_markdown_to_html(markdown: str) -> str:
    """Minimal regex-based Markdown to HTML conversion.

    Covers ATX headings 1-3, bold, italic, fenced and inline code, images,
    links and paragraph breaks.  Never raises.
    """
    out: list[str] = []
    pos = 0
    for m in _FENCE_RE.finditer(markdown):
        out.extend(_fallback_text(markdown[pos:m.start()]))
        lang = m.group(1).strip()
        cls = f' class="language-{_html.escape(lang)}"' if lang else ""
        out.append(f"<pre><code{cls}>{_html.escape(m.group(2), quote=False)}</code></pre>")
        pos = m.end()
    out.extend(_fallback_text(markdown[pos:]))
    return "\n".join(out)
