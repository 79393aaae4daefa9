# app/core/logging_middleware.py
from fastapi import Request
from app.core.logger import logger
import time

async def log_requests(request: Request, call_next):
    """요청/응답 로깅 (본문은 남기지 않음)"""

    started = time.perf_counter()
    client = request.client.host if request.client else "-"
    label = f"{request.method} {request.url.path}"

    logger.info(f"-> {label} from {client}")

    try:
        response = await call_next(request)
    except Exception as e:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.error(f"!! {label} - Error: {e} - Time: {elapsed_ms:.2f}ms")
        logger.exception("Exception details:")
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    log = logger.warning if response.status_code >= 500 else logger.info
    log(f"<- {label} - Status: {response.status_code} - Time: {elapsed_ms:.2f}ms")

    return response
