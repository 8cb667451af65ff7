# Dashboard - FastAPI Backend
#
# Local REST API used by the dashboard UI. Only the vault is served here;
# the rest of the dashboard keeps its state in the UI layer.

import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core import EventSeverity, EventType, get_audit_logger
from .security import get_session_token, initialize_session_token
from .vault_routes import router as vault_router, set_vault_manager

logger = logging.getLogger(__name__)

app = FastAPI(
    title="EagleDash API",
    description="Study dashboard backend: PIN-protected credential vault",
    version=__version__,
)

# The UI is served from a local dev server or from this backend
_allowed_origins = [
    "http://localhost:3000", "http://127.0.0.1:3000",
    "http://localhost:5173", "http://127.0.0.1:5173",
    "http://localhost:8000", "http://127.0.0.1:8000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vault_router)


@app.on_event("startup")
async def startup_event():
    """Create the session token unless one was provided before startup."""
    try:
        get_session_token()
    except RuntimeError:
        initialize_session_token()
    logger.info("EagleDash API ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the vault's auto-lock timer and record the shutdown."""
    set_vault_manager(None)
    get_audit_logger().log_event(
        event_type=EventType.SYSTEM_STOP,
        severity=EventSeverity.INFO,
        message="EagleDash API server shutting down"
    )


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


def start_api_server(host: str = "127.0.0.1", port: int = 8000):
    """
    Start FastAPI server.

    Args:
        host: Host to bind to (default: localhost only)
        port: Port to listen on
    """
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    start_api_server()
