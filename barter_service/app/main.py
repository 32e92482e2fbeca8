from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import close_client, get_database

from .api.health import router as health_router
from .api.v1 import api_router
from .config import get_app_config
from .seed import seed_database


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    """시작 시 (설정돼 있으면) 데모 데이터를 넣고, 종료 시 Mongo 연결을 닫는다."""

    if get_app_config().economy.seed_demo_data:
        seed_database(get_database())

    try:
        yield
    finally:
        close_client()


def create_app() -> FastAPI:
    setup_logger(name="barter-service")
    app = FastAPI(
        title="Skillio Barter Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # 공통 Request/Span ID 로그 미들웨어
    app.add_middleware(RequestTraceMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    """명령행에서 실행할 수 있도록 uvicorn 런처를 제공한다."""

    import uvicorn

    port = int(os.getenv("BARTER_SERVICE_PORT", "8003"))
    logger.info("starting barter-service on port %d", port)
    uvicorn.run(
        "barter_service.app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
