from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from apiconv.core.codes import DEFAULT_MESSAGES, SERVER_ERROR, SUCCESS
from apiconv.core.errors import is_business_error
from apiconv.core.i18n import Translator, code_key
from apiconv.core.status import StatusRegistry
from apiconv.schemas.common import ApiResponse


class Responder:
    """Builds the envelope and picks the HTTP status for a handler outcome.

    Every method returns a single `JSONResponse`; return it from the route (or the
    exception handler) exactly once.
    """

    def __init__(self, registry: StatusRegistry, translator: Translator | None = None) -> None:
        self.registry = registry
        self.translator = translator

    def localize(self, code: int, message: str) -> str:
        """Translate the default message of a common code; custom messages pass through."""

        if self.translator is None or DEFAULT_MESSAGES.get(code) != message:
            return message
        return self.translator.template(code_key(code)) or message

    def respond(
        self,
        http_status: int,
        code: int,
        msg: str,
        data: Any | None = None,
        *,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        envelope = ApiResponse[Any](code=code, msg=msg, data=jsonable_encoder(data))
        return JSONResponse(status_code=http_status, content=envelope.to_wire(), headers=headers)

    def success(self, data: Any | None = None) -> JSONResponse:
        return self.respond(status.HTTP_200_OK, SUCCESS.code, self.localize(SUCCESS.code, SUCCESS.message), data)

    def success_message(self, msg: str) -> JSONResponse:
        return self.respond(status.HTTP_200_OK, SUCCESS.code, msg)

    def fail(self, err: BaseException) -> JSONResponse:
        """Render `err` as a failure envelope.

        Structured business errors keep their code, message and details, and the
        status comes from the registry. Anything else becomes a generic 500; the
        original exception is never serialized, so log it before calling this.
        """

        if is_business_error(err):
            return self.respond(
                self.registry.resolve(err.code),  # type: ignore[attr-defined]
                err.code,  # type: ignore[attr-defined]
                self.localize(err.code, err.message),  # type: ignore[attr-defined]
                err.details,  # type: ignore[attr-defined]
            )

        return self.respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SERVER_ERROR.code,
            self.localize(SERVER_ERROR.code, SERVER_ERROR.message),
        )
