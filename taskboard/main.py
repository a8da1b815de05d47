import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard.api.v1.api import api_router
from taskboard.core.config import settings
from taskboard.core.exceptions import TaskboardError
from taskboard.core.logging import configure_logging
from taskboard.db.session import init_db
from taskboard.services.loader import ScreenClosed

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskboardError)
async def taskboard_error_handler(request: Request, exc: TaskboardError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(ScreenClosed)
async def screen_closed_handler(request: Request, exc: ScreenClosed):
    # Client went away mid-load; nobody is listening for this response
    return JSONResponse(status_code=499, content={"detail": "Client closed request"})


# Include API routes
app.include_router(api_router, prefix=settings.API_V1_STR)
