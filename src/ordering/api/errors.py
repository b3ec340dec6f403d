"""Exception-to-HTTP mapping for the storefront API.

Protean's own exceptions (validation, not found) use its FastAPI
integration; the checkout errors below have no Protean counterpart.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import CheckoutInProgress, TransientNetworkError

logger = structlog.get_logger(__name__)


def register_storefront_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(TransientNetworkError)
    async def transient_network_error_handler(request: Request, exc: TransientNetworkError):
        logger.warning("Order service unavailable", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=503, content={"error": exc.message})

    @app.exception_handler(CheckoutInProgress)
    async def checkout_in_progress_handler(request: Request, exc: CheckoutInProgress):
        return JSONResponse(status_code=409, content={"error": str(exc) or "Checkout already in progress"})
