"""Payload redaction for debug dumps.

Anything written to *stderr* by the ``debug_dump_*`` switches goes through
:func:`redact` first:

* Values under credential-like keys (``Authorization``, ``token``,
  ``api_key`` ...) are masked, keeping at most the last four characters
  of the configured token.
* The configured token is scrubbed from every string in the tree.
* Inline ``data:`` image URIs are shortened to ``<data_uri:N_chars>`` so
  a pasted screenshot does not flood the terminal.
"""

from __future__ import annotations

import copy
import re
from typing import Any

_DATA_URI_RE = re.compile(
    r"data:[a-zA-Z0-9_.+-]+/[a-zA-Z0-9_.+-]+;base64,[A-Za-z0-9+/=]+"
)

# A key is sensitive if any of these substrings appears in it
# (case-insensitive): ``access_token``, ``x-api-key`` ...
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "token",
    "secret",
    "password",
    "authorization",
    "cookie",
    "api_key",
    "api-key",
})


def _mask(value: str, token: str | None) -> str:
    if token and token in value:
        suffix = token[-4:] if len(token) >= 4 else "****"
        placeholder = f"<redacted:...{suffix}>"
        if token in placeholder:
            placeholder = "<redacted>"
        value = value.replace(token, placeholder)
    return re.sub(r"(Bearer\s+)\S+", r"\1<redacted>", value)


def _redact_value(value: Any, token: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, token)
    if isinstance(value, list):
        return [_redact_value(item, token) for item in value]
    if isinstance(value, str):
        value = _DATA_URI_RE.sub(lambda m: f"<data_uri:{len(m.group(0))}_chars>", value)
        return _mask(value, token)
    return value


def _redact_dict(d: dict, token: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = _mask(value, token) if isinstance(value, str) else "<redacted>"
        else:
            result[key] = _redact_value(value, token)
    return result


def redact(payload: dict, token: str | None = None) -> dict:
    """Return a deep copy of *payload* with credentials and blobs removed.

    The original *payload* is never mutated.

    >>> redact({"Authorization": "Bearer ntn_abc123"})
    {'Authorization': 'Bearer <redacted>'}
    """
    return _redact_dict(copy.deepcopy(payload), token)
