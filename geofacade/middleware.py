import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging

from .config import LOG_EXCLUDE_PATHS, get_http_trust_xff
from .context import GeoContext, current_geo_context
from .logging_config import trace_id_var
from .resolver import client_context_from_request
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("app")


class TracingMiddleware(BaseHTTPMiddleware):
    """Request tracing, structured logging and per-request geo context"""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.exclude_paths = LOG_EXCLUDE_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate or reuse trace ID
        trace_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        trace_token = trace_id_var.set(trace_id)

        # One geo context per request; never shared between requests
        forwarded_for, peer_addr = client_context_from_request(
            request, trust_forwarded=get_http_trust_xff()
        )
        geo_context = GeoContext(forwarded_for=forwarded_for, peer_addr=peer_addr)
        request.state.geo_context = geo_context
        geo_token = current_geo_context.set(geo_context)

        client_ip = peer_addr or "unknown"
        start_time = time.time()

        try:
            response = await call_next(request)

            latency_ms = round((time.time() - start_time) * 1000, 2)
            self._log_request(
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                latency_ms=latency_ms,
                client_ip=client_ip,
            )
            prometheus_metrics.increment_requests(response.status_code, request.url.path)

            response.headers["X-Request-ID"] = trace_id
            return response

        except Exception as e:
            latency_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(f"Request failed: {str(e)}", extra={
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "latency_ms": latency_ms,
                "client_ip": client_ip,
            })
            prometheus_metrics.increment_requests(500, request.url.path)
            raise
        finally:
            current_geo_context.reset(geo_token)
            trace_id_var.reset(trace_token)

    def _log_request(self, method: str, path: str, status: int, latency_ms: float, client_ip: str):
        """Log HTTP request with structured data"""
        if path in self.exclude_paths:
            return

        if status >= 400:
            log_level = logging.ERROR if status >= 500 else logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(log_level, "HTTP Request", extra={
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": client_ip,
        })
