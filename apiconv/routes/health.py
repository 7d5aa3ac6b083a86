from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from apiconv.core.dependencies import get_responder
from apiconv.core.response import Responder
from apiconv.schemas.common import ApiResponse

router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict], tags=["health"])
def health(responder: Responder = Depends(get_responder)) -> JSONResponse:
    return responder.success({"ok": True})
