from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError, TransientError
from auth_service.app.repositories.session_repository import StoreUnavailableError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_transient_error(request: Request, exc: TransientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.error(f"Transient error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": error_dict},
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
    error_dict = {
        "code": "STORE_UNAVAILABLE",
        "message": "Session store temporarily unavailable",
    }
    logger.error(f"Unhandled session store failure: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": error_dict},
        headers={"Retry-After": "1"},
    )


def create_app(ApplicationConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        janitor = None
        if ApplicationConfig.SESSION_JANITOR_ENABLED:
            from auth_service.depends import build_session_janitor

            janitor = build_session_janitor()
            janitor.start()
        app.state.session_janitor = janitor
        yield
        if janitor is not None:
            janitor.shutdown()

    app = FastAPI(title="Auth Session Service", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from auth_service.api.routes import auth, health_check, sessions

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(sessions.router, tags=["Sessions"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(TransientError, handle_transient_error)
    app.add_exception_handler(StoreUnavailableError, handle_store_unavailable)

    return app
