"""Pick a page title out of raw Markdown."""

from __future__ import annotations

import re

_H1_RE = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
_H2_RE = re.compile(r"^##[ \t]+(.+)$", re.MULTILINE)
_LEADING_HASHES_RE = re.compile(r"^#+\s*")


def extract_title(markdown: str, placeholder: str = "Untitled") -> str:
    """Return the title a page created from *markdown* should get.

    Preference order: the first ``# H1`` line, then the first ``## H2``
    line, then the first non-empty line with any leading ``#`` removed,
    then *placeholder*.

    >>> extract_title("intro\\n\\n## Section\\n")
    'Section'
    >>> extract_title("\\n\\n### Notes\\nbody")
    'Notes'
    """
    for pattern in (_H1_RE, _H2_RE):
        m = pattern.search(markdown)
        if m and m.group(1).strip():
            return m.group(1).strip()

    for line in markdown.splitlines():
        candidate = _LEADING_HASHES_RE.sub("", line.strip()).strip()
        if candidate:
            return candidate

    return placeholder
