from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope for every response, success or failure.

    `code` is 0 on success, otherwise the business error code. `data` is left out of
    the wire body when there is nothing to send.
    """

    code: int
    msg: str
    data: T | None = None

    def to_wire(self) -> dict[str, Any]:
        if self.data is None:
            return self.model_dump(mode="json", exclude={"data"})
        return self.model_dump(mode="json")


# Field error map carried in `data` for INVALID_PARAMS responses.
FieldErrors = dict[str, str]
