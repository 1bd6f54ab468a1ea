from __future__ import annotations

from fastapi import FastAPI

from source_lines import __version__
from source_lines.api.errors import install_exception_handlers
from source_lines.api.lifespan import lifespan
from source_lines.api.middleware import RequestLoggingMiddleware
from source_lines.api.routes.health import router as health_router
from source_lines.api.routes.lines import router as lines_router
from source_lines.api.routes.root import router as root_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Source Lines API",
        description="Source code lines with SCM blame and coverage metadata.",
        version=__version__,
        lifespan=lifespan,
    )

    install_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(lines_router)

    return app
