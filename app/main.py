import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import AsyncSessionLocal, check_db, init_db, engine
from app.api.v1.router import api_router
from app.services.auth_service import AuthService

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def bootstrap_admin():
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return
    async with AsyncSessionLocal() as db:
        await AuthService(db).ensure_admin(
            settings.ADMIN_EMAIL, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})...")
    await init_db()
    logger.info("Database initialized")
    await bootstrap_admin()
    yield
    logger.info("Shutting down...")
    await engine.dispose()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Token-Refresh-Needed"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


def _error_body(message, code=None) -> dict:
    body = {"error": message}
    if code:
        body["code"] = code
    return body


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = getattr(exc, "code", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), code),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    messages = []
    for err in errors:
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg", "invalid value").removeprefix("Value error, ")
        messages.append(f"{field}: {msg}" if field else msg)
    return JSONResponse(
        status_code=400,
        content=_error_body("; ".join(messages) or "Invalid request", "VALIDATION_ERROR"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    body = _error_body("Internal server error", "INTERNAL_ERROR")
    if settings.DEBUG:
        body["detail"] = str(exc)
    return JSONResponse(status_code=500, content=body)


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/health")
async def health_check():
    healthy = await check_db()
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "database": "reachable" if healthy else "unreachable",
            "version": settings.VERSION,
            "service": settings.PROJECT_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )

@app.get("/")
async def root():
    return {
        "message": "LearnPath API",
        "docs": f"{settings.API_V1_STR}/docs",
        "version": settings.VERSION
    }
