"""
AI Assessment Relay — FastAPI Service

Relays assessment-widget chat to Anthropic/OpenAI, scores finished
assessments and forwards them to a webhook.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from assessment_api.config import settings
from assessment_api.errors import AssessmentError
from assessment_api.logging_config import bind_request_id, configure_logging
from assessment_api.routes import assessment
from assessment_api.routes.assessment import CORS_HEADERS

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report which provider is active."""
    configure_logging(settings.log_level, settings.log_json)
    logger.info(
        "Assessment relay starting (provider=%s, webhook=%s)",
        settings.llm_provider,
        "configured" if settings.webhook_url else "disabled",
    )
    yield


app = FastAPI(
    title="AI Assessment Relay",
    description="Chat relay, lead scoring and webhook hand-off for the assessment widget.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def correlation_id(request: Request, call_next):
    cid = bind_request_id(request.headers.get("X-Correlation-ID"))
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = cid
    return response


@app.exception_handler(AssessmentError)
async def assessment_error_handler(request: Request, exc: AssessmentError):
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(level, "%s: %s", type(exc).__name__, exc, extra={"status_code": exc.status_code})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message, "details": str(exc)},
        headers=CORS_HEADERS,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method not allowed"}, headers=CORS_HEADERS)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "details": str(exc.detail)},
        headers=CORS_HEADERS,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
        headers=CORS_HEADERS,
    )


app.include_router(assessment.router, prefix="/ai-assessment")


@app.get("/health", tags=["health"])
async def health():
    """Health check for load balancers and container orchestration."""
    return {"status": "ok"}


def run() -> None:
    """Console entry point: `assessment-relay`."""
    uvicorn.run("assessment_api.main:app", host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
