"""OrderDesk FastAPI application.

Admin- and storefront-facing HTTP surface over the aftersales domain. Commands
are processed synchronously; every request runs inside the aftersales domain
context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay from aftersales/domain.toml:
#   - unset / "test"  → event_processing = "sync"  (relay and projector fire in UoW)
#   - "production"    → event_processing = "async" (handled by src/server.py)
from aftersales.domain import aftersales
from aftersales.utils.logging import bind_context, clear_context
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

aftersales.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="OrderDesk API",
    description="Order lifecycle and complaint resolution",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the aftersales domain context for each request and tag its log lines."""
    clear_context()
    bind_context(method=request.method, path=request.url.path)
    try:
        with aftersales.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from aftersales.api import (  # noqa: E402
    complaint_router,
    notification_router,
    order_router,
    refund_router,
    register_error_handlers,
)

app.include_router(order_router)
app.include_router(complaint_router)
app.include_router(refund_router)
app.include_router(notification_router)

register_exception_handlers(app)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": aftersales.name})
