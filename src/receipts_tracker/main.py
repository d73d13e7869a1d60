from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from receipts_tracker.api.router import router as api_router
from receipts_tracker.bootstrap import bootstrap
from receipts_tracker.core.logging import RequestContextMiddleware
from receipts_tracker.web.ui import router as ui_router


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        bootstrap()
        yield

    app = FastAPI(title="Receipts Tracker", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestContextMiddleware)
    app.include_router(api_router)
    app.include_router(ui_router)
    return app


app = create_app()
