"""FastAPI main application for PasteForge"""

import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pasteforge.app import PasteForgeApp
from pasteforge.utils.config import load_settings
from pasteforge.utils.logger import get_logger

from .api import auth_router, pastes_router, profile_router, router as api_router, user_router

logger = get_logger(__name__)


def _cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS")
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(forge: Optional[PasteForgeApp] = None) -> FastAPI:
    """
    Build the FastAPI application.

    When ``forge`` is None the container is built from ``load_settings()``
    on startup, so a missing secret fails the boot rather than the import.
    """
    app = FastAPI(
        title="PasteForge",
        description="Share text and code snippets",
        version="1.0.0",
    )
    app.state.forge = forge

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed request", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    @app.on_event("startup")
    async def startup_event():
        if app.state.forge is None:
            app.state.forge = PasteForgeApp(load_settings())
        logger.info("PasteForge startup completed")

    @app.on_event("shutdown")
    async def shutdown_event():
        if app.state.forge is not None:
            app.state.forge.close()

    app.include_router(api_router)
    app.include_router(auth_router)
    app.include_router(pastes_router)
    app.include_router(profile_router)
    app.include_router(user_router)
    return app


app = create_app()
