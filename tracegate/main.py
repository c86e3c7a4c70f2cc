"""TraceGate FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tracegate.api.audit import router as audit_router
from tracegate.api.demo import router as demo_router
from tracegate.api.evidence import router as evidence_router
from tracegate.api.health import router as health_router
from tracegate.api.nodes import router as nodes_router
from tracegate.api.release import router as release_router
from tracegate.api.sync import router as sync_router
from tracegate.config import Settings, settings
from tracegate.database import RecordStore
from tracegate.engine.errors import TraceGateError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the application around its own record store."""
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = RecordStore(
            cfg.database_url,
            echo=cfg.log_level == "DEBUG",
            create_schema=cfg.auto_create_schema,
        )
        await store.open()
        app.state.store = store
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(
        title="TraceGate - Traceability & Release Gating",
        description="Tracks requirement traceability, approvals and test evidence, "
        "and gates releases behind a readiness check",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(TraceGateError)
    async def tracegate_error_handler(request: Request, exc: TraceGateError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(health_router, tags=["Health"])
    app.include_router(sync_router, prefix="/v1/sync", tags=["Sync"])
    app.include_router(release_router, prefix="/v1/release", tags=["Release"])
    app.include_router(evidence_router, prefix="/v1/evidence", tags=["Evidence"])
    app.include_router(nodes_router, prefix="/v1/nodes", tags=["Nodes"])
    app.include_router(audit_router, prefix="/v1/audit", tags=["Audit"])
    app.include_router(demo_router, prefix="/v1/demo", tags=["Demo"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"service": "TraceGate", "version": VERSION, "docs": "/docs"}

    return app


app = create_app()
