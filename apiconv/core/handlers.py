from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apiconv.core.codes import CODES_BY_HTTP_STATUS, INVALID_PARAMS, SERVER_ERROR
from apiconv.core.errors import ErrorCode
from apiconv.core.request_id import current_request_id

logger = logging.getLogger(__name__)


def _conventions(request: Request):
    return request.app.state.conventions


def _reason_phrase(status_code: int) -> str | None:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return None


def install_exception_handlers(app: FastAPI) -> None:
    """Route every failure through the envelope.

    Business errors keep their code; native validation errors become INVALID_PARAMS
    with a field map; bare HTTP errors map onto the common codes; anything else is
    logged and answered with a generic 500.
    """

    @app.exception_handler(ErrorCode)
    async def handle_error_code(request: Request, exc: ErrorCode) -> JSONResponse:
        if exc.cause is not None:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=(type(exc.cause), exc.cause, exc.cause.__traceback__),
            )
        else:
            logger.info("%s %s -> business error %s", request.method, request.url.path, exc)
        return _conventions(request).responder.fail(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        conventions = _conventions(request)
        errors = conventions.translator.translate(exc.errors(), strip_sources=True)
        logger.info("%s %s -> invalid params %s", request.method, request.url.path, errors)
        return conventions.responder.fail(INVALID_PARAMS.with_details(errors))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        responder = _conventions(request).responder
        detail = exc.detail if isinstance(exc.detail, str) else None
        # Starlette fills in the reason phrase when no detail was given.
        if detail is not None and detail == _reason_phrase(exc.status_code):
            detail = None

        err = CODES_BY_HTTP_STATUS.get(exc.status_code)
        if err is None:
            err = SERVER_ERROR if exc.status_code >= 500 else INVALID_PARAMS
        message = detail or responder.localize(err.code, err.message)
        return responder.respond(exc.status_code, err.code, message, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        # Runs in ServerErrorMiddleware, after RequestIdMiddleware has unwound; the id
        # is still on the scope state.
        conventions = _conventions(request)
        request_id = getattr(request.state, "request_id", None)

        token = current_request_id.set(request_id)
        try:
            # Log full exception, return safe message.
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        finally:
            current_request_id.reset(token)

        response = conventions.responder.fail(exc)
        if request_id:
            response.headers[conventions.settings.request_id_header] = request_id
        return response
