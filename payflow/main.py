"""
Payflow sandbox: an in-memory payments API for exercising the lifecycle client.

Serves ``MockPaymentsBackend`` over the same routes ``HttpPaymentsTransport``
calls, so polling, flow steps and the 404-right-after-creation case can be
driven end to end without a real provider.

Start the server:
    uvicorn payflow.main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payflow.api.health import router as health_router
from payflow.api.payments import router as payments_router
from payflow.config import settings
from payflow.engine.errors import TransportError
from payflow.transport.mock import MockPaymentsBackend

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def create_app(backend: Optional[MockPaymentsBackend] = None) -> FastAPI:
    app = FastAPI(
        title="Payflow Sandbox",
        description=(
            "In-memory payments API with asynchronous, multi-step authorization: "
            "provider selection, forms, bank redirects and eventual execution."
        ),
        version="0.1.0",
    )
    app.state.backend = backend or MockPaymentsBackend()

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError):
        return JSONResponse(status_code=exc.status_code or 500, content={"detail": str(exc)})

    app.include_router(health_router)
    app.include_router(payments_router)
    return app


app = create_app()
