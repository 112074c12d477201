import json
import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.concurrency import iterate_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from nsstore.common.config import get_settings
from nsstore.infra.observability.metrics import LATENCY, REQUESTS

MAX_TRACE_BODY = 2048

_MASK_PATTERNS = [
    r"(?i)(token|secret|api_key|x-api-key|password|authorization|signature)\s*[:=]\s*[^\s&]+",
    r"(?i)authorization\s*:\s*bearer\s+[A-Za-z0-9\-_.]+",
]


def _is_textual(content_type: str | None) -> bool:
    if not content_type:
        return False
    return content_type.startswith("application/json") or content_type.startswith(
        "application/problem+json"
    ) or content_type.startswith("text/")


class MetricsMiddleware(BaseHTTPMiddleware):
    SENSITIVE_KEYS = {
        "password",
        "secret",
        "token",
        "api_key",
        "x-api-key",
        "authorization",
        "url",
    }

    def _mask_mapping(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            masked: dict[str, Any] = {}
            for k, v in obj.items():
                if isinstance(k, str) and k.lower() in self.SENSITIVE_KEYS:
                    masked[k] = "***"
                else:
                    masked[k] = self._mask_mapping(v)
            return masked
        if isinstance(obj, list):
            return [self._mask_mapping(x) for x in obj]
        return obj

    def _mask_text(self, text: str) -> str:
        masked = text
        for p in _MASK_PATTERNS:
            masked = re.sub(
                p,
                lambda m: m.group(0).split(":")[0].split("=")[0] + ": ***",
                masked,
            )
        return masked

    def _render_body(self, raw: bytes, content_type: str | None) -> str:
        if not _is_textual(content_type):
            return f"<{len(raw)} bytes>"
        decoded = raw.decode("utf-8", errors="replace")
        try:
            parsed = json.loads(decoded)
        except ValueError:
            text = self._mask_text(decoded)
        else:
            text = json.dumps(self._mask_mapping(parsed), ensure_ascii=False)
        if len(text) > MAX_TRACE_BODY:
            text = text[:MAX_TRACE_BODY] + "...<truncated>"
        return text

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        client_ip = request.headers.get("X-Forwarded-For")
        if client_ip:
            client_ip = client_ip.split(",")[0].strip()
        elif request.client:
            client_ip = request.client.host

        trace_http = get_settings().TRACE_HTTP
        request_body: str | None = None
        if trace_http:
            raw_body = await request.body()
            if raw_body:
                request_body = self._render_body(
                    raw_body, request.headers.get("Content-Type")
                )

            async def receive():
                return {"type": "http.request", "body": raw_body, "more_body": False}

            request._receive = receive

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = time.perf_counter() - start
            logging.getLogger("http").exception(
                "request_error method=%s route=%s status=%s duration_ms=%.3f request_id=%s",
                request.method,
                request.url.path,
                500,
                round(elapsed * 1000, 3),
                request_id,
                extra={
                    "extra": {
                        "method": request.method,
                        "route": request.url.path,
                        "status": 500,
                        "duration_ms": round(elapsed * 1000, 3),
                        "request_id": request_id,
                        "client_ip": client_ip,
                        "exception": repr(exc),
                    }
                },
            )
            raise

        elapsed = time.perf_counter() - start
        status_code = response.status_code

        route_template = request.scope.get("route", None)
        if route_template and hasattr(route_template, "path"):
            route = route_template.path
        else:
            route = request.url.path

        REQUESTS.labels(request.method, route, str(status_code)).inc()
        LATENCY.labels(request.method, route).observe(elapsed)

        if "X-Request-Id" not in response.headers:
            response.headers["X-Request-Id"] = request_id

        response_body: str | None = None
        if trace_http:
            chunks = b""
            async for chunk in response.body_iterator:
                chunks += chunk
            response.body_iterator = iterate_in_threadpool(iter([chunks]))
            if chunks:
                response_body = self._render_body(
                    chunks, response.headers.get("Content-Type")
                )

        level = logging.INFO
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING

        duration_ms = round(elapsed * 1000, 3)
        extra_payload = {
            "method": request.method,
            "route": route,
            "query": request.url.query,
            "status": status_code,
            "duration_ms": duration_ms,
            "request_id": request_id,
            "client_ip": client_ip,
            "user_agent": request.headers.get("User-Agent"),
        }
        if trace_http:
            extra_payload["request_body"] = request_body
            extra_payload["response_body"] = response_body

        logging.getLogger("http").log(
            level,
            "request method=%s route=%s status=%s duration_ms=%.3f request_id=%s client_ip=%s",
            request.method,
            route,
            status_code,
            duration_ms,
            request_id,
            client_ip or "-",
            extra={"extra": extra_payload},
        )
        return response
