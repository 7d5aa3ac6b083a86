from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Request

from apiconv.core.codes import INVALID_PARAMS
from apiconv.core.conventions import Conventions
from apiconv.core.response import Responder
from apiconv.core.validation import M, Validator


def get_conventions(request: Request) -> Conventions:
    conventions = getattr(request.app.state, "conventions", None)
    if conventions is None:
        raise RuntimeError("Conventions are not installed; call apiconv.install(app, conventions) at startup")
    return conventions


def get_responder(request: Request) -> Responder:
    return get_conventions(request).responder


def get_validator(request: Request) -> Validator:
    return get_conventions(request).validator


def validated_body(model: type[M]) -> Callable[[Request], Awaitable[M]]:
    """Dependency factory: bind the request to `model` or fail with INVALID_PARAMS.

    Usage:
        @router.post("/users")
        async def create(user: Annotated[UserIn, Depends(validated_body(UserIn))]): ...
    """

    async def dependency(request: Request) -> M:
        result = await get_validator(request).bind_and_validate(request, model)
        if not result.ok:
            raise INVALID_PARAMS.with_details(result.errors)
        return result.value

    return dependency
