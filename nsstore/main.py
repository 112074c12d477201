import logging

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nsstore.api.v1.deps import get_adapter, require_api_key
from nsstore.api.v1.routers.storage import router as storage_router
from nsstore.common.config import get_settings
from nsstore.common.logging import setup_logging
from nsstore.infra.observability.metrics import metrics_app
from nsstore.infra.observability.middleware import MetricsMiddleware
from nsstore.services.adapter import NamespacedStorageAdapter
from nsstore.services.results import ErrorResult

ERROR_CODE_BY_STATUS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    429: "too_many_requests",
    500: "internal_error",
    502: "bad_gateway",
    503: "service_unavailable",
}


def _resolve_error_code(status_code: int) -> str:
    if status_code == 422:
        return "validation_error"
    return ERROR_CODE_BY_STATUS.get(status_code, "unknown_error")


def create_app(adapter: NamespacedStorageAdapter | None = None) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.namespaced_bucket)
    app = FastAPI(
        title="nsstore",
        version="v1.0",
        description="Namespaced buckets on a single shared object storage bucket",
    )
    app.state.adapter = adapter

    if settings.CORS_ENABLED:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(
        storage_router,
        prefix="/api/v1",
        tags=["storage"],
        dependencies=[Depends(require_api_key)],
    )

    if settings.ENABLE_METRICS:
        app.add_middleware(MetricsMiddleware)
        app.mount("/metrics", metrics_app)

    @app.on_event("startup")
    def on_startup() -> None:
        logging.getLogger("nsstore.startup").info(
            "serving namespaced storage [event=startup] (bucket=%s, endpoint=%s, region=%s)",
            settings.namespaced_bucket,
            settings.S3_ENDPOINT_URL or "<aws>",
            settings.AWS_REGION,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger = logging.getLogger("http")
        logger.log(
            logging.WARNING if exc.status_code < 500 else logging.ERROR,
            "http_exception status=%s detail=%s method=%s path=%s request_id=%s",
            exc.status_code,
            exc.detail,
            request.method,
            request.url.path,
            request.headers.get("X-Request-Id"),
            extra={
                "extra": {
                    "status": exc.status_code,
                    "detail": exc.detail,
                    "method": request.method,
                    "route": request.url.path,
                    "request_id": request.headers.get("X-Request-Id"),
                }
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            media_type="application/problem+json",
            content={
                "type": "about:blank",
                "title": "HTTP Error",
                "status": exc.status_code,
                "detail": exc.detail,
                "error_code": _resolve_error_code(exc.status_code),
                "instance": str(request.url),
                "request_id": request.headers.get("X-Request-Id"),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=422,
            media_type="application/problem+json",
            content={
                "type": "about:blank",
                "title": "Validation Error",
                "status": 422,
                "detail": jsonable_encoder(exc.errors()),
                "error_code": _resolve_error_code(422),
                "instance": str(request.url),
                "request_id": request.headers.get("X-Request-Id"),
            },
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/ready")
    async def ready(storage: NamespacedStorageAdapter = Depends(get_adapter)):
        # loads (or lazily creates) the shared bucket and its metadata document
        result = await storage.list_buckets()
        if isinstance(result, ErrorResult):
            return {"status": "not_ready", "detail": {"storage": result.msg}}
        return {"status": "ready", "buckets": len(result.buckets)}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("nsstore.main:app", host="0.0.0.0", port=8000)
