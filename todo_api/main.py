import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_HEADERS, CORS_METHODS, CORS_ORIGINS, TASKS_FILE
from .dispatcher import RequestDispatcher
from .errors import ErrorKind
from .routers import tasks
from .schemas.task import Envelope
from .store import TaskStore

logger = logging.getLogger(__name__)

_HTTP_ERROR_KINDS = {
    400: ErrorKind.VALIDATION,
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.UNSUPPORTED_OPERATION,
}


def create_app(store: Optional[TaskStore] = None) -> FastAPI:
    """Build the API around an explicit TaskStore (defaults to ``TASKS_FILE``)."""
    if store is None:
        store = TaskStore(TASKS_FILE)

    # Create the task document on startup
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.ensure_document()
        yield

    app = FastAPI(
        title="Todo API",
        description="Task list CRUD over a single JSON document",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.dispatcher = RequestDispatcher(store)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    app.include_router(tasks.router, tags=["tasks"])

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        kind = _HTTP_ERROR_KINDS.get(exc.status_code, ErrorKind.INTERNAL)
        envelope = Envelope(success=False, message=str(exc.detail), error=kind.value)
        return JSONResponse(status_code=exc.status_code, content=envelope.to_dict(), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        envelope = Envelope(success=False, message=f"Server error: {exc}", error=ErrorKind.INTERNAL.value)
        return JSONResponse(status_code=500, content=envelope.to_dict())

    @app.get("/")
    def read_root():
        return {"message": "Todo API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
