from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from .middleware.request_logging import RequestLoggingMiddleware
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error = exc.base_error
    logger.warning(f"Client error on {request.url.path}: {error.code}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "code": error.code, "message": error.message},
    )


async def handle_server_error(request: Request, exc: ServerError):
    # detail is internal only; message is already safe for the caller
    error = exc.base_error
    logger.error(f"Server error on {request.url.path}: {error.code} ({error.detail})")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "code": error.code, "message": error.message},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.warning(f"Malformed request body on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "code": "INVALID_REQUEST",
            "message": "Request body is malformed",
        },
    )


def create_app(ApplicationConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ApplicationConfig.AUTO_CREATE_TABLES:
            from src.depends import create_tables

            await create_tables()
            logger.info("Database tables ensured")
        yield

    app = FastAPI(title=ApplicationConfig.APP_NAME, version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    from src.api.routes import auth, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
