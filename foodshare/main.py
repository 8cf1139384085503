import warnings
# suppress the passlib crypt deprecation warning
warnings.filterwarnings(
    "ignore",
    category=DeprecationWarning,
    module="passlib.utils"
)
import asyncio
import logging
import sys
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from foodshare.config import settings
from foodshare.database import init_db
from foodshare.middleware import SECURITY_HEADERS, RequestIdMiddleware, SecurityHeadersMiddleware, request_id
from foodshare.routers import (
    auth, dashboard, food_claims, food_listings, health, organizations, restaurants, volunteers,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def log_uncaught_exception(exc_type, exc, tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))


def log_async_error(loop, context):
    exc = context.get("exception")
    logger.error(
        f"Unhandled async error: {context.get('message', 'no message')}",
        exc_info=(type(exc), exc, exc.__traceback__) if exc else None,
    )


sys.excepthook = log_uncaught_exception


@asynccontextmanager
async def lifespan(app: FastAPI):
    asyncio.get_running_loop().set_exception_handler(log_async_error)
    # run your init_db at startup
    logger.info(f"Starting Food Redistribution API (env={settings.ENVIRONMENT})")
    await init_db()
    yield
    logger.info("Shutting down Food Redistribution API")


app = FastAPI(title="Food Redistribution API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(restaurants.router)
app.include_router(organizations.router)
app.include_router(volunteers.router)
app.include_router(food_listings.router)
app.include_router(food_claims.router)
app.include_router(dashboard.router)


@app.get("/")
async def read_root():
    return {"message": "Food Redistribution API"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors(), custom_encoder={ValueError: str})
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled exception on {request.method} {request.url.path} (request {request_id(request)})"
    )
    content = {"detail": "Internal server error"}
    if not settings.is_production:
        content["error"] = str(exc)
        content["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    # this response skips the http middleware stack
    headers = {**SECURITY_HEADERS, "X-Request-Id": request_id(request)}
    return JSONResponse(status_code=500, content=content, headers=headers)
