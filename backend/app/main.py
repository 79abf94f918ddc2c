"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.engine.registry import load_transforms
from app.errors import ScreenSightError

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.screensight_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="ScreenSight",
        description="UI screenshot analysis — palette, elements and layout for code generation",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import all transform modules to trigger registration
    load_transforms()

    @app.exception_handler(ScreenSightError)
    async def _analysis_error(request: Request, exc: ScreenSightError) -> JSONResponse:
        logger.info("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=422, content={"error": exc.kind, "detail": str(exc)})

    from app.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
