# taskapi/main.py
"""FastAPI application for the task tracker backend."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskapi import config
from taskapi.database import create_db_and_tables
from taskapi.errors import TaskError, ValidationFailed
from taskapi.logging_setup import setup_logging
from taskapi.routes.tasks import router as tasks_router
from taskapi.schemas import ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    setup_logging(config.LOG_LEVEL)
    create_db_and_tables()
    logger.info("Task API ready (database %s)", config.DATABASE_URL)
    yield


app = FastAPI(title="Task Tracker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


def _error_response(exc: TaskError) -> JSONResponse:
    body = ErrorResponse(message=exc.message, errors=exc.errors)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True))


@app.exception_handler(TaskError)
async def task_error_handler(request: Request, exc: TaskError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    failure = ValidationFailed.from_error_list(list(exc.errors()))
    logger.info("%s %s rejected: %s", request.method, request.url.path, failure.errors)
    return _error_response(failure)


app.include_router(tasks_router)


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    """Liveness check."""
    return HealthResponse()


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    setup_logging(config.LOG_LEVEL)
    uvicorn.run("taskapi.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
