"""Error hierarchy for the rostersync library.

Every public error class inherits from RosterError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

The merge functions themselves never raise for payloads that match the
presence wire contract.  These errors surface only from the optional
validation layer (:mod:`rostersync.validate`).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the library can raise."""

    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    DUPLICATE_REF = "DUPLICATE_REF"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class RosterError(Exception):
    """Base exception for all rostersync errors.

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
# Payload errors
# ---------------------------------------------------------------------------

class RosterValidationError(RosterError):
    """A snapshot or diff payload does not match the presence wire shape.

    Context keys: ``side`` (``"state"``, ``"joins"`` or ``"leaves"``),
    ``key``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        code: str = ErrorCode.INVALID_PAYLOAD,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class RosterDuplicateRefError(RosterValidationError):
    """Two instances of the same key share one reference.

    Context keys: ``side``, ``key``, ``ref``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            cause=cause,
            code=ErrorCode.DUPLICATE_REF,
        )
