"""
Training Program Engine API.

Wires logging, CORS, request tracing and error rendering around the
program generation router.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import program_generation
from core.config import settings
from core.logging import bind_request_id, current_request_id, reset_request_id, setup_logging
from core.exceptions import APIException
from services.program_framework import CATALOGUE, close_generation_client
import logging
import time

REQUEST_ID_HEADER = "X-Request-ID"

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Training Program Engine API",
    description="Personalised strength program generation with validated AI candidates and template fallback",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.on_event("shutdown")
async def shutdown_generation_client():
    """Release the shared generation client's HTTP connections."""
    await close_generation_client()


def _request_fields(request: Request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else None,
    }


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    """
    Bind a request id (client-supplied or generated) for the duration of the
    request, log the exchange with timing, and echo the id back.
    """
    token = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
    fields = _request_fields(request)
    started = time.perf_counter()
    logger.info(f"Request: {request.method} {request.url.path}", extra={"extra_fields": fields})

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            exc_info=True,
            extra={"extra_fields": {**fields, "error": str(e)}},
        )
        raise
    else:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"Response: {request.method} {request.url.path} - {response.status_code}",
            extra={"extra_fields": {**fields, "status_code": response.status_code, "process_time_ms": elapsed_ms}},
        )
        response.headers[REQUEST_ID_HEADER] = current_request_id() or ""
        response.headers["X-Process-Time"] = str(elapsed_ms / 1000)
        return response
    finally:
        reset_request_id(token)


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything the router did not translate is a 500 with a generic body."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={"extra_fields": _request_fields(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health():
    """
    Liveness plus whether external generation is configured; without it the
    generate endpoint answers 503.
    """
    return {
        "status": "healthy",
        "generation_configured": settings.generation_configured,
        "catalogue_version": CATALOGUE.version,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
    }


@app.get("/ping")
async def ping():
    return {"pong": True}


app.include_router(program_generation.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )
