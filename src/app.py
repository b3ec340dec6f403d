"""Storefront ordering FastAPI application.

Web server that processes commands synchronously via HTTP. Every request is
wrapped in the ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.admin.badge import pending_badge_lifespan  # noqa: E402
from ordering.domain import ordering  # noqa: E402
from ordering.utils.logging import bind_request_context, clear_request_context  # noqa: E402

ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Ordering API",
    description="Carts, checkout, order workflow, tracking and analytics",
    lifespan=pending_badge_lifespan(ordering),
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
    """Push the ordering domain context for each request."""
    if request.url.path in ("/health", "/docs", "/openapi.json"):
        return await call_next(request)

    bind_request_context(method=request.method, path=request.url.path)
    try:
        with ordering.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api.errors import register_storefront_exception_handlers  # noqa: E402
from ordering.api.routes import (  # noqa: E402
    admin_router,
    cart_router,
    checkout_router,
    delivery_router,
    order_router,
    tracking_router,
)

app.include_router(order_router)
app.include_router(admin_router)
app.include_router(tracking_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(delivery_router)

register_storefront_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
            },
        }
    )
