"""Error hierarchy for mdnotion.

Every public error class inherits from :class:`MdNotionError`.  Each
carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and
an optional ``cause`` (chained exception).

Errors also carry an ``http_status`` class attribute so that a service
layer wrapping the client can map them to a response status without a
lookup table: caller input problems are ``400``, everything else is
``500``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error mdnotion can raise."""

    INPUT_ERROR = "INPUT_ERROR"
    PUBLISH_ERROR = "PUBLISH_ERROR"
    BATCH_ERROR = "BATCH_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    NETWORK_ERROR = "NETWORK_ERROR"
    CONVERSION_ERROR = "CONVERSION_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class MdNotionError(Exception):
    """Base exception for all mdnotion errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    http_status: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Caller-facing errors
# ---------------------------------------------------------------------------

class MdNotionInputError(MdNotionError):
    """A required input was missing or malformed.

    Raised before any network call is attempted.

    Context keys: ``field``.
    """

    http_status = 400

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INPUT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionPublishError(MdNotionError):
    """Creating or populating the sub-page failed.

    Wraps the underlying :class:`MdNotionError`, available as ``cause``.

    Context keys: ``page_id`` (``None`` if the page was never created),
    ``batches_submitted``, ``blocks_submitted``, ``cleaned_up``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PUBLISH_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionBatchError(MdNotionError):
    """A block batch could not be appended to the page.

    Context keys: ``page_id``, ``batch_index``, ``batches_submitted``,
    ``blocks_submitted``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.BATCH_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionConversionError(MdNotionError):
    """Markdown could not be converted into blocks.

    Context keys: ``stage``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONVERSION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# API / transport errors
# ---------------------------------------------------------------------------

class MdNotionValidationError(MdNotionError):
    """Notion API returned 400 -- the request payload was invalid.

    Context keys: ``status_code``, ``notion_code``, ``body``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionAuthError(MdNotionError):
    """Notion API returned 401 -- the integration token is invalid or expired.

    Context keys: ``status_code``, ``notion_code``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.AUTH_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionPermissionError(MdNotionError):
    """Notion API returned 403 -- the integration lacks access to the parent page.

    Context keys: ``status_code``, ``notion_code``, ``operation``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PERMISSION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionNotFoundError(MdNotionError):
    """Notion API returned 404 -- the parent page or block does not exist.

    Context keys: ``status_code``, ``notion_code``, ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionRateLimitError(MdNotionError):
    """Notion API returned 429 -- rate limit exceeded.

    Context keys: ``retry_after_seconds``, ``attempt``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.RATE_LIMITED,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionRetryExhaustedError(MdNotionError):
    """Every attempt for a retryable request failed.

    With the default ``retry_max_attempts=1`` this is raised on the first
    429 or 5xx response.

    Context keys: ``attempts``, ``last_status_code``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.RETRY_EXHAUSTED,
            message=message,
            context=context,
            cause=cause,
        )


class MdNotionNetworkError(MdNotionError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Also raised when a successful response carries a body that is not a
    JSON object.

    Context keys: ``url``, ``attempt`` (transport failures), ``status_code``
    (undecodable bodies).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NETWORK_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
