"""Request tracing for the GERPAAS API."""
import re
import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("gerpaas-api.middleware")

SKIP_LOG_PATHS = {"/health"}
REQUEST_ID_HEADER = "X-Request-ID"

# Caller-supplied ids are echoed only when they look like an id
_CLIENT_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "")
    return supplied if _CLIENT_ID.match(supplied) else uuid.uuid4().hex


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Propagates X-Request-ID (the caller's, or a fresh one), reports the
    handling time in X-Process-Time (ms) and logs one line per request.
    Sync routes read request.state.request_id to tag their run logs.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed", request.method, request.url.path,
                extra={"request_id": request_id},
            )
            raise

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)

        if request.url.path not in SKIP_LOG_PATHS:
            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                level, "%s %s -> %d", request.method, request.url.path, response.status_code,
                extra={"request_id": request_id, "duration_ms": duration_ms},
            )
        return response
