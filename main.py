from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from container import MAILER_FROM_SETTINGS, build_container
from db.migrate import create_tables
from router.auth_router import router as auth_router
from router.leave_management_router import router as leave_management_router
from settings import Settings, get_settings
from utils.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, *, mailer=MAILER_FROM_SETTINGS) -> FastAPI:
    settings = settings or get_settings()

    # Configure logging
    logging.basicConfig(level=settings.log_level)

    container = build_container(settings, mailer=mailer)
    if settings.auto_create_tables:
        create_tables(container.engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Leave management API started (db={container.engine.url.render_as_string(hide_password=True)}, "
            f"mail={'on' if container.dispatcher.enabled else 'off'})"
        )
        yield
        container.close()

    app = FastAPI(
        title="Leave Management API",
        description="API for submitting and approving employee leave requests.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Serve uploaded files
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    #  All Routes are Declared here
    app.include_router(auth_router, tags=["Auth"])
    app.include_router(leave_management_router, tags=["Leave Requests"])

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=5000)
