"""
Application entry point for the Task Tracker API
Wires routers, the authentication gate and the JSON error envelope
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.deps import get_current_user
from .api.routes import auth, tasks
from .config import get_settings
from .database.database import create_db_and_tables, get_engine
from .utils.errors import AppError
from .utils.logging import setup_logging
from .utils.responses import error_response

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables(get_engine())
    app.state.expose_errors = settings.is_development
    logger.info("%s started (environment=%s)", settings.app_name, settings.environment)
    yield
    logger.info("%s stopped", settings.app_name)


app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


################################################################################
#                                    ROUTES                                    #
################################################################################
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
# Every task route sits behind the authentication gate
app.include_router(
    tasks.router,
    prefix="/api/tasks",
    tags=["tasks"],
    dependencies=[Depends(get_current_user)],
)


@app.get("/api/health")
async def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


################################################################################
#                                ERROR HANDLERS                                #
################################################################################
def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) if parts else "body"


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from validators with "Value error, "
    return message.removeprefix("Value error, ")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return error_response(exc.status_code, exc.message, errors=exc.errors)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(error.get("loc", ())), "message": _clean_message(error.get("msg", "Invalid value"))}
        for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "Route not found")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # Set at startup; error details only leave the process in development
    extra = {"error": str(exc)} if getattr(request.app.state, "expose_errors", False) else {}
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!", **extra)
