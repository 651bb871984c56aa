from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles

from content import router as content_router
from core import settings
from core.db import Database
from core.errors import AppError
from core.project import get_project_config, web_dir
from core.responses import install_exception_handlers
from database import router as database_router
from users import router as users_router

logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    dsn = settings.database_url()
    if dsn:
        # Optional: the admin endpoints can still connect later.
        try:
            await database.connect_dsn(dsn)
        except AppError as exc:
            logger.error("startup_connect_failed error=%s", exc.message)
    try:
        yield
    finally:
        await database.close()


def create_app(database: Database | None = None) -> FastAPI:
    app = FastAPI(title="board-api", lifespan=lifespan)
    app.state.database = database if database is not None else Database()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Registered after CORSMiddleware so it runs first: every OPTIONS request
    # is answered here, pre-flight or not.
    @app.middleware("http")
    async def short_circuit_options(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=_CORS_HEADERS)
        return await call_next(request)

    install_exception_handlers(app)

    app.include_router(database_router.router, prefix="/api", tags=["database"])
    app.include_router(users_router.router, prefix="/api", tags=["users"])
    app.include_router(content_router.router, prefix="/api", tags=["content"])

    static_dir = web_dir()
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning("web_dir_missing path=%s", static_dir)

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse("/static/index.html", status_code=301)

    return app


app = create_app()


def _log_routes(app: FastAPI) -> None:
    for route in app.routes:
        if isinstance(route, APIRoute) and route.path.startswith("/api"):
            methods = ",".join(sorted(route.methods or ()))
            logger.info("route %-7s %s", methods, route.path)


def main() -> None:
    logging.basicConfig(
        level=settings.log_level(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    project = get_project_config()
    logger.info("project_root=%s web_dir=%s", project.root_dir, project.web_dir)

    _log_routes(app)

    host, port = settings.host(), settings.port()
    logger.info("Starting server on http://%s:%s", host, port)
    # uvicorn exits the process with status 1 when the port cannot be bound.
    uvicorn.run(app, host=host, port=port, log_level=logging.getLevelName(settings.log_level()).lower())


if __name__ == "__main__":
    main()
