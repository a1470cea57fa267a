"""Single place that turns a fault into an HTTP response."""

import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import PlainTextResponse

from utils.errors import BadRequestError, StoreFault

logger = logging.getLogger(__name__)


def error_response(request: Request, exc: Exception) -> PlainTextResponse:
    """Render `exc` as a plain-text response; details go to the log only."""
    if isinstance(exc, BadRequestError):
        logger.warning("Rejected request on %s %s: %s", request.method, request.url.path, exc)
        return PlainTextResponse(str(exc), status_code=400)

    if isinstance(exc, StoreFault):
        logger.error(
            "Database error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return PlainTextResponse("Database error", status_code=500)

    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return PlainTextResponse("Internal Server Error", status_code=500)


async def handle_exception(request: Request, exc: Exception) -> PlainTextResponse:
    """FastAPI exception handler delegating to `error_response`."""
    return error_response(request, exc)


def log_unhandled_async(loop: Any, context: Dict[str, Any]) -> None:
    """Event loop exception handler: log unobserved task faults and keep running."""
    exc = context.get("exception")
    logger.error("Unhandled Rejection: %s", context.get("message", ""), exc_info=exc)
