"""Code-point safe string splitting.

Notion rejects any ``rich_text[].text.content`` longer than 2 000
characters.  Long code blocks and long paragraphs are therefore cut into
several segments carrying the same annotations.  Python ``str`` slicing
works on code-points, so a slice never lands in the middle of a
multi-byte character.
"""

from __future__ import annotations

NOTION_TEXT_LIMIT = 2000


def split_string(text: str, limit: int = NOTION_TEXT_LIMIT) -> list[str]:
    """Split *text* into consecutive chunks of at most *limit* characters.

    Returns an empty list for empty input.  Joining the chunks always gives
    back *text*.

    >>> split_string("hello world", 5)
    ['hello', ' worl', 'd']

    Raises
    ------
    ValueError
        If *limit* is less than 1.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    if not text:
        return []

    return [text[start : start + limit] for start in range(0, len(text), limit)]
