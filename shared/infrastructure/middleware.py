import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Logs method, path, status and duration of every API request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.get_full_path()} {response.status_code} {duration_ms:.1f}ms",
        )
        return response
