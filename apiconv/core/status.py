from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType

from fastapi import status

logger = logging.getLogger(__name__)

BUSINESS_CODE_FLOOR = 2_000_000
SYSTEM_CODE_FLOOR = 1_000_000


def status_from_code_range(code: int) -> int:
    """Infer the HTTP status from the magnitude of a business code."""

    # Business errors travel as 200; the client reads `code` from the body.
    if code >= BUSINESS_CODE_FLOOR:
        return status.HTTP_200_OK
    if code >= SYSTEM_CODE_FLOOR:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    # Unknown codes are treated as server failures.
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class StatusRegistry:
    """Business code -> HTTP status resolution.

    Lookup order: success sentinel (0), explicit overrides, range convention.
    Overrides are registered at startup and read by every request, so writers
    swap in a fresh read-only snapshot and readers never take the lock.
    """

    def __init__(self, overrides: Mapping[int, int] | None = None) -> None:
        self._lock = threading.Lock()
        self._overrides: Mapping[int, int] = MappingProxyType({})
        if overrides:
            self.update(overrides)

    def register(self, code: int, http_status: int) -> None:
        self.update({code: http_status})

    def update(self, overrides: Mapping[int, int]) -> None:
        with self._lock:
            merged = dict(self._overrides)
            merged.update({int(code): int(http_status) for code, http_status in overrides.items()})
            self._overrides = MappingProxyType(merged)
        logger.debug("Registered %d status override(s)", len(overrides))

    def snapshot(self) -> Mapping[int, int]:
        return self._overrides

    def resolve(self, code: int) -> int:
        if code == 0:
            return status.HTTP_200_OK

        http_status = self._overrides.get(code)
        if http_status is not None:
            return http_status

        return status_from_code_range(code)
