"""Media Catalog FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from mediacatalog import __version__
from mediacatalog.config import settings
from mediacatalog.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    _setup_logging()
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)

    await init_db()
    logger.info(
        "Media Catalog v%s started (%s) — listening on %s:%s",
        __version__, settings.environment, settings.host, settings.port,
    )

    try:
        yield
    finally:
        logger.info("Media Catalog shutting down")


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("aiosqlite",):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Application factory."""
    from mediacatalog.api.routes import api_router

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    # Serve the prebuilt dashboard bundle when present
    static_dir = Path(settings.frontend_dir)
    if static_dir.is_dir() and (static_dir / "index.html").exists():
        if (static_dir / "static").is_dir():
            app.mount("/static", StaticFiles(directory=static_dir / "static"), name="frontend-static")

        _index = static_dir / "index.html"

        @app.get("/", include_in_schema=False)
        async def _spa_root():
            return FileResponse(_index)

        @app.get("/{full_path:path}", include_in_schema=False)
        async def _spa_fallback(full_path: str):
            file_path = (static_dir / full_path).resolve()
            if full_path and file_path.is_file() and file_path.is_relative_to(static_dir.resolve()):
                return FileResponse(file_path)
            return FileResponse(_index)

        logger.info("Frontend mounted from %s", static_dir)
    else:
        logger.info("No frontend found at %s — API-only mode", static_dir)

        @app.get("/", include_in_schema=False)
        async def _api_info():
            return {
                "message": "Media Database API Server",
                "status": "Development Mode",
                "api_health": f"{settings.api_prefix}/health",
            }

    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "mediacatalog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
