import logging
import time
import uuid
import contextvars
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context var to store request id so any code during the request can fetch it
request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdFilter(logging.Filter):
    """Attach request_id to every LogRecord so formatter can include it."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        return True


def setup_logging(level="INFO") -> None:
    """
    Configure the root logger once at app startup.
    Every line carries the request id of the request that produced it.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    if any(isinstance(f, RequestIdFilter) for h in root.handlers for f in h.filters):
        # Avoid adding duplicate handlers when reloading during development
        return

    handler = logging.StreamHandler()
    fmt = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logger.

    Reuses the caller's X-Request-ID when present, otherwise generates one,
    exposes it to log records and echoes it on the response.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_ctx.set(req_id)

        logger = logging.getLogger("cravecart.request")
        start = time.perf_counter()
        client_host = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.exception("%s %s failed after %dms client=%s", request.method, request.url.path, duration_ms, client_host)
            raise
        else:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                "%s %s -> %s in %dms client=%s",
                request.method, request.url.path, response.status_code, duration_ms, client_host,
            )
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        finally:
            request_id_ctx.reset(token)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()
