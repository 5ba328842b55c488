import logging
import time

from fastapi import Request

logger = logging.getLogger("app.requests")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging once for the API process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
