# backend/app/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .logging_config import configure_logging

from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router
from .routers.auth import router as auth_router
from .routers.audit import router as audit_router

from .routers.properties import router as properties_router
from .routers.property_scores import router as property_scores_router
from .routers.legal_audit_reports import router as legal_audit_reports_router
from .routers.customers import router as customers_router
from .routers.rera import router as rera_router

API_PREFIX = "/api"


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="OwnItRight Property Advisory Back-Office",
        version=settings.app_version,
    )

    # added first so it runs inside RequestIDMiddleware and sees request.state.request_id
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Core
    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(audit_router, prefix=API_PREFIX)

    # Advisory back-office
    app.include_router(properties_router, prefix=API_PREFIX)
    app.include_router(property_scores_router, prefix=API_PREFIX)
    app.include_router(legal_audit_reports_router, prefix=API_PREFIX)
    app.include_router(customers_router, prefix=API_PREFIX)
    app.include_router(rera_router, prefix=API_PREFIX)

    return app


app = create_app()
