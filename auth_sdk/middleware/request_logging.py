# auth_sdk/middleware/request_logging.py
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("auth_sdk.middleware.request_logging")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Пишет в лог одну запись на каждый обработанный запрос.
    Запрос, завершившийся необработанным исключением, логируется со статусом 500,
    исключение пробрасывается дальше.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            latency_ms = (time.perf_counter() - start) * 1000
            client_ip = request.client.host if request.client else "-"
            logger.info(
                f"request status={status_code} method={request.method} "
                f"path={request.url.path} query={request.url.query!r} ip={client_ip} "
                f"user_agent={request.headers.get('user-agent', '')!r} latency_ms={latency_ms:.3f}"
            )
