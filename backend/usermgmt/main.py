# backend/usermgmt/main.py

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from usermgmt.api.auth_routes import router as auth_router
from usermgmt.api.routes import router as user_management_router
from usermgmt.core.config import Settings, get_settings
from usermgmt.core.logging_config import configure_logging
from usermgmt.core.storage import build_blob_store

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Oops! Something went wrong. Please try again in a moment."


async def invalid_request_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "Invalid input."})


async def unhandled_error_handler(request: Request, exc: Exception):
    # ServerErrorMiddleware re-raises after this response; the server logs the traceback
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_ERROR},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Passing ``settings`` pins them for every request of this
    app instead of the environment-derived ones.
    """
    injected = settings is not None
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="User Management API", version="0.1.0")
    if injected:
        app.dependency_overrides[get_settings] = lambda: settings

    # one store (and boto3 client) shared by all requests
    app.state.blob_store = build_blob_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.add_exception_handler(RequestValidationError, invalid_request_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(user_management_router, prefix="/user-management", tags=["user-management"])

    if settings.storage_backend == "local":
        # avatars written by LocalBlobStore
        app.mount(settings.uploads_base_url, StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    if settings.auth_disabled:
        logger.warning("AUTH_DISABLED is set: requests without a session act as the first user")

    return app


app = create_app()
