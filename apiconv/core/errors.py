from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any


@dataclass(eq=False)
class ErrorCode(Exception):
    """A business error with a stable numeric code.

    Instances are shared (see `apiconv.core.codes`), so they are never mutated:
    the `with_*` helpers return a copy. `message` is what the client sees; `cause`
    is kept for logs only and is never serialized.
    """

    code: int
    message: str
    details: Any | None = None
    cause: BaseException | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.cause is not None:
            self.__cause__ = self.cause

    def __setattr__(self, name: str, value: Any) -> None:
        # Business fields are write-once; exception bookkeeping (__traceback__,
        # __cause__, __notes__) must stay writable for the interpreter and contextlib.
        if name in _READ_ONLY and name in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        super().__setattr__(name, value)

    def __str__(self) -> str:
        return f"code: {self.code}, msg: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorCode):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def with_details(self, details: Any) -> ErrorCode:
        return replace(self, details=details)

    def with_cause(self, cause: BaseException) -> ErrorCode:
        return replace(self, cause=cause)

    def with_message(self, message: str) -> ErrorCode:
        return replace(self, message=message)


_READ_ONLY = frozenset(f.name for f in fields(ErrorCode))


def is_business_error(err: object) -> bool:
    """True when `err` carries an integer code, a string message and a details slot."""

    if isinstance(err, ErrorCode):
        return True
    code = getattr(err, "code", None)
    message = getattr(err, "message", None)
    return (
        isinstance(code, int)
        and not isinstance(code, bool)
        and isinstance(message, str)
        and hasattr(err, "details")
    )
