from __future__ import annotations

from typing import Final

from fastapi import status

from apiconv.core.errors import ErrorCode

SUCCESS: Final = ErrorCode(0, "success")

# 1xxxxxx and above are server-side codes; 2xxxxxx and above are business codes
# the client renders itself. The common codes below sit above 2,000,000 numerically,
# so each one is pinned to its HTTP status in DEFAULT_STATUS_OVERRIDES.
SERVER_ERROR: Final = ErrorCode(10000000, "internal server error")
INVALID_PARAMS: Final = ErrorCode(10000001, "invalid params")
NOT_FOUND: Final = ErrorCode(10000002, "resource not found")
UNAUTHORIZED: Final = ErrorCode(10000003, "unauthorized")
FORBIDDEN: Final = ErrorCode(10000004, "forbidden")
TOO_MANY_REQUESTS: Final = ErrorCode(10000007, "too many requests")

DEFAULT_STATUS_OVERRIDES: Final[dict[int, int]] = {
    SUCCESS.code: status.HTTP_200_OK,
    SERVER_ERROR.code: status.HTTP_500_INTERNAL_SERVER_ERROR,
    INVALID_PARAMS.code: status.HTTP_400_BAD_REQUEST,
    NOT_FOUND.code: status.HTTP_404_NOT_FOUND,
    UNAUTHORIZED.code: status.HTTP_401_UNAUTHORIZED,
    FORBIDDEN.code: status.HTTP_403_FORBIDDEN,
    TOO_MANY_REQUESTS.code: status.HTTP_429_TOO_MANY_REQUESTS,
}

# Used when a bare Starlette HTTPException has to be expressed as a business code.
CODES_BY_HTTP_STATUS: Final[dict[int, ErrorCode]] = {
    status.HTTP_400_BAD_REQUEST: INVALID_PARAMS,
    status.HTTP_401_UNAUTHORIZED: UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: FORBIDDEN,
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    status.HTTP_429_TOO_MANY_REQUESTS: TOO_MANY_REQUESTS,
}

# English defaults; other locales translate these through the `code:<code>` catalog keys.
DEFAULT_MESSAGES: Final[dict[int, str]] = {
    err.code: err.message
    for err in (SUCCESS, SERVER_ERROR, INVALID_PARAMS, NOT_FOUND, UNAUTHORIZED, FORBIDDEN, TOO_MANY_REQUESTS)
}
