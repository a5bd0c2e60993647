import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# 이 시간(ms)을 넘는 요청은 WARNING 으로 기록 (학급 일괄 PDF 등)
SLOW_REQUEST_MS = 2000


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)

        level = logging.WARNING if latency_ms >= SLOW_REQUEST_MS else logging.DEBUG
        logger.log(level, "%s %s -> %d (%dms)", request.method, request.url.path, response.status_code, latency_ms)
        return response
