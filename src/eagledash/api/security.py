# API Security - Session token for the local dashboard
#
# A random token is generated when the backend starts and handed to the
# dashboard UI. Every vault endpoint requires it in X-Session-Token, so
# other local processes cannot talk to the vault API.

import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

_SESSION_TOKEN: Optional[str] = None


def initialize_session_token() -> str:
    """
    Generate a new 256-bit session token for this backend instance.

    Returns:
        The generated token (printed for the dashboard UI)
    """
    global _SESSION_TOKEN
    _SESSION_TOKEN = secrets.token_urlsafe(32)
    return _SESSION_TOKEN


def get_session_token() -> str:
    """
    Get the current session token.

    Raises:
        RuntimeError: If the token hasn't been initialized
    """
    if _SESSION_TOKEN is None:
        raise RuntimeError("Session token not initialized. Call initialize_session_token() first.")
    return _SESSION_TOKEN


async def verify_session_token(x_session_token: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency that checks X-Session-Token.

    Raises:
        HTTPException: 503 before initialization, 401 if missing or wrong
    """
    if _SESSION_TOKEN is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session token not initialized"
        )

    if x_session_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Session-Token header"
        )

    # Constant-time comparison
    if not secrets.compare_digest(x_session_token, _SESSION_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token"
        )

    return x_session_token
