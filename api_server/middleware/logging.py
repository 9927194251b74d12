"""Logging configuration"""

import logging
import os
import time
import uuid
from typing import Callable
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

LOGGER_NAMES = ("api_server", "judge_core", "llm_client")


def setup_logging() -> logging.Logger:
    """Configure JSON-style logging for the server and the judge core

    LOG_LEVEL selects the level (default INFO); DEBUG also logs every
    detection prompt and raw model answer.
    """
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=logging.WARNING,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": %(message)r}',
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    for name in LOGGER_NAMES:
        logging.getLogger(name).setLevel(level)
    return logging.getLogger("api_server")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging"""

    def __init__(self, app: FastAPI):
        super().__init__(app)
        self.logger = logging.getLogger("api_server")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = round((time.time() - start_time) * 1000, 2)
        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "ip": request.client.host if request.client else "unknown",
        }

        # Log level based on status code
        if response.status_code >= 500:
            self.logger.error(log_data)
        elif response.status_code >= 400:
            self.logger.warning(log_data)
        else:
            self.logger.info(log_data)

        response.headers["X-Request-ID"] = request_id
        return response
