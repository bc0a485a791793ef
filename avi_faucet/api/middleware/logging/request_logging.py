import time
import json
from datetime import datetime
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from avi_faucet.core.exceptions.handler import GlobalErrorHandler
from avi_faucet.core.logger.logger import logger

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One JSON line per request. The correlation id comes from X-Request-ID or
    is generated, is stored on ``request.state`` for the error handlers and is
    echoed back on the response, including on the 500 envelope for an
    unhandled exception.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id

        entry = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "mode": getattr(request.app.state, "mode", None),
            "client_ip": request.client.host if request.client else None,
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }

        try:
            response = await call_next(request)
        except Exception as e:
            response = await GlobalErrorHandler.general_exception_handler(request, e)
            response.headers[REQUEST_ID_HEADER] = request_id
            entry.update({
                "status_code": response.status_code,
                "error": str(e),
                "error_type": type(e).__name__,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            })
            logger.error(json.dumps(entry))
            return response

        entry.update({
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        })
        response.headers[REQUEST_ID_HEADER] = request_id

        # Health checks are frequent; keep them out of the info stream
        if request.url.path == "/health":
            logger.debug(json.dumps(entry))
        else:
            logger.info(json.dumps(entry))

        return response
