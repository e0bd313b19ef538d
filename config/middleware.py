# config/middleware.py
import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """요청마다 method / path / status / 소요시간(ms) 한 줄 기록"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        try:
            response = self.get_response(request)
        except Exception:
            duration_ms = int((time.monotonic() - started) * 1000)
            logger.exception(
                "request failed method=%s path=%s duration_ms=%s",
                request.method, request.path, duration_ms,
            )
            raise

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "request completed method=%s path=%s status=%s duration_ms=%s",
            request.method, request.path, response.status_code, duration_ms,
        )
        return response
