import logging
import time
from fastapi import Request

logger = logging.getLogger(__name__)

async def request_logging_middleware(request: Request, call_next):
    """Simple request logging middleware"""
    start_time = time.time()

    method = request.method
    path = request.url.path

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)
    logger.info(f"{method} {path} | {response.status_code} | {duration}ms")

    return response
