from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bizsuite.app.core.config import settings
from bizsuite.app.core.errors import register_exception_handlers

logger = logging.getLogger(__name__)


def create_app(
    *,
    data_dir: str | Path | None = None,
    require_auth: bool | None = None,
    tokens: dict[str, str] | None = None,
) -> FastAPI:
    """
    Build the mock BizSuite API.

    Dependencies (sqlite stores under `data_dir`) are created on startup and exposed as
    `app.state.deps`.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from bizsuite.app.dependencies import create_dependencies

        app.state.deps = create_dependencies(data_dir, require_auth=require_auth, tokens=tokens)
        logger.info("Mock dependencies initialized: require_auth=%s", app.state.deps.require_auth)
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Mock of the BizSuite HR/finance administration API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    from bizsuite.app.modules.audit_trail.router import create_router as audit_trail_router
    from bizsuite.app.modules.credit_notes.router import create_router as credit_notes_router
    from bizsuite.app.modules.employee_documents.router import create_router as employee_documents_router
    from bizsuite.app.modules.employees.router import create_router as employees_router
    from bizsuite.app.modules.files.router import create_router as files_router
    from bizsuite.app.modules.loans.router import create_router as loans_router
    from bizsuite.app.modules.products.router import create_router as products_router
    from bizsuite.app.modules.subscriptions.router import create_router as subscriptions_router
    from bizsuite.app.modules.tags.router import create_router as tags_router
    from bizsuite.app.modules.tax_declarations.router import create_router as tax_declarations_router

    app.include_router(employees_router(), prefix="/api", tags=["Employees"])
    app.include_router(products_router(), prefix="/api", tags=["Products"])
    app.include_router(tags_router(), prefix="/api", tags=["Tags"])
    app.include_router(credit_notes_router(), prefix="/api", tags=["Credit Notes"])
    app.include_router(audit_trail_router(), prefix="/api", tags=["Audit Trail"])
    app.include_router(loans_router(), prefix="/api", tags=["Loans"])
    app.include_router(subscriptions_router(), prefix="/api", tags=["Subscriptions"])
    app.include_router(tax_declarations_router(), prefix="/api", tags=["Tax Declarations"])
    app.include_router(employee_documents_router(), prefix="/api", tags=["Employee Documents"])
    app.include_router(files_router(), prefix="/api", tags=["Files"])

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "bizsuite-mock-api"}

    @app.get("/")
    async def root():
        return {"service": settings.APP_NAME, "version": settings.APP_VERSION}

    return app
