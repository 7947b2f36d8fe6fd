import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from backoffice.config import Settings, configure_logging
from backoffice.deps import make_engine
from backoffice.mls.client import MLSClient, MLSError
from backoffice.routers import inventory, listings, notifications, users
from backoffice.sql import metadata

LOG = logging.getLogger("app")

def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    mls_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application. Settings not passed in are read from the
    environment at startup; a ConfigurationError there aborts startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = settings or Settings.from_env()
        configure_logging(cfg.log_level)

        eng = engine or make_engine(cfg.database_url)
        metadata.create_all(eng)

        app.state.settings = cfg
        app.state.engine = eng
        app.state.mls = MLSClient(cfg, transport=mls_transport)
        LOG.info("backoffice started (MLS endpoint %s)", cfg.mls_api_url)
        try:
            yield
        finally:
            if engine is None:
                eng.dispose()

    app = FastAPI(
        title="Brokerage Back-Office API",
        version="1.0.0",
        description="MLS listings search proxy, property inventory, notifications and user administration.",
        lifespan=lifespan,
    )

    @app.exception_handler(MLSError)
    async def mls_error_handler(request: Request, exc: MLSError):
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    app.include_router(listings.router)
    app.include_router(inventory.router)
    app.include_router(notifications.router)
    app.include_router(users.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app

app = create_app()
