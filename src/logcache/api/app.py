"""FastAPI 앱 팩토리 + CORS + exception handler + 시작 시 캐시 정리."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from logcache.api import deps
from logcache.api.routes import groups, logs
from logcache.exceptions import InvalidRequestError, LogCacheError
from logcache.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        deps.get_pruner().prune()
    except Exception:
        logger.warning("Startup cache pruning failed, continuing", exc_info=True)
    yield


def create_app() -> FastAPI:
    configure_logging(deps.get_config())
    app = FastAPI(title="logcache", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(logs.router, tags=["logs"])
    app.include_router(groups.router, tags=["groups"])

    @app.exception_handler(InvalidRequestError)
    async def handle_invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(LogCacheError)
    async def handle_logcache_error(request: Request, exc: LogCacheError) -> JSONResponse:
        logger.error("Request failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    return app


app = create_app()
