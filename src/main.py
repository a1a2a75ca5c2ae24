import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.logger import CategoryLogger, configure_category_logger, get_category_logger
from core.redaction import redact_event

from routes.auth import router as auth_router
from routes.accounts import router as accounts_router

from middlewares.http_logging import HttpLoggingMiddleware
from middlewares.error_logging import ErrorLoggingMiddleware


def configure_structlog() -> None:
    logging.basicConfig(format="%(message)s", level=logging.DEBUG if settings.DEBUG else logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_event,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === STARTUP ===
    get_category_logger().success(
        f"Server online on port {settings.PORT}",
        {"port": settings.PORT, "env": settings.ENV},
    )
    yield
    # === SHUTDOWN ===
    get_category_logger().info("Server shutting down", {"env": settings.ENV})


async def not_found(request: Request, exc: Exception):
    return JSONResponse(
        status_code=404,
        content={"error": "Route not found", "method": request.method, "path": request.url.path},
    )


async def server_error(request: Request, exc: Exception):
    return JSONResponse(status_code=500, content={"error": "Something went wrong"})


def create_app(category_logger: Optional[CategoryLogger] = None) -> FastAPI:
    configure_structlog()
    # diretório de logs criado aqui, uma vez por processo
    configure_category_logger(category_logger)

    app = FastAPI(title=settings.APP_NAME, version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )
    # ordem: o último adicionado é o mais externo
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    app.add_exception_handler(404, not_found)
    app.add_exception_handler(Exception, server_error)

    app.include_router(auth_router)
    app.include_router(accounts_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "env": settings.ENV}

    return app


if __name__ == "__main__":
    uvicorn.run("main:create_app", factory=True, host=settings.HOST, port=settings.PORT)
