from __future__ import annotations

import logging
from typing import Final

from apiconv.core.request_id import current_request_id

_DEFAULT_FORMAT: Final[str] = "%(levelname)s %(asctime)s %(name)s [rid=%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Stamp each record with the id of the request being handled ("-" outside one)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id.get() or "-"
        return True


def configure_logging(*, level: str = "INFO") -> None:
    """Configure Python logging once.

    Uvicorn/Gunicorn may also configure handlers; this keeps local + container runs consistent.
    """

    root = logging.getLogger()

    # If handlers already exist, don't clobber them (common under Uvicorn workers);
    # only attach the request id filter.
    if root.handlers:
        root.setLevel(level)
        for handler in root.handlers:
            if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
                handler.addFilter(RequestIdFilter())
        return

    logging.basicConfig(level=level, format=_DEFAULT_FORMAT)
    for handler in root.handlers:
        handler.addFilter(RequestIdFilter())

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
