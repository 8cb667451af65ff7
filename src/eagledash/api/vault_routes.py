# Vault API - endpoints for the dashboard's vault screen
#
# - Set PIN / unlock / lock
# - Add, list, search, reveal and remove credentials
# - Listings never carry secret material; reveal is a separate call

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..core import AppStateStore, get_settings
from ..vault import VaultManager, VaultResult
from ..vault.encryption import MIN_PIN_LENGTH
from .security import verify_session_token

router = APIRouter(prefix="/api/vault", tags=["vault"])

# Global vault instance (one vault per dashboard process)
_vault_manager: Optional[VaultManager] = None

# Error kind -> HTTP status
ERROR_STATUS = {
    "WeakPin": status.HTTP_400_BAD_REQUEST,
    "InvalidEntry": status.HTTP_400_BAD_REQUEST,
    "IncorrectPin": status.HTTP_401_UNAUTHORIZED,
    "VaultLocked": status.HTTP_403_FORBIDDEN,
    "NotFound": status.HTTP_404_NOT_FOUND,
    "PinNotConfigured": status.HTTP_409_CONFLICT,
    "DecryptionFailure": 422,  # Unprocessable Content
}


def get_vault_manager() -> VaultManager:
    """Return the process-wide VaultManager, creating it on first use."""
    global _vault_manager
    if _vault_manager is None:
        _vault_manager = VaultManager(AppStateStore(get_settings().state_db_path))
    return _vault_manager


def set_vault_manager(manager: Optional[VaultManager]) -> None:
    """Replace the process-wide VaultManager (None resets it)."""
    global _vault_manager
    if _vault_manager is not None and _vault_manager is not manager:
        _vault_manager.close()
    _vault_manager = manager


def _raise_for(result: VaultResult) -> None:
    if not result.success:
        raise HTTPException(
            status_code=ERROR_STATUS.get(result.error_kind, status.HTTP_400_BAD_REQUEST),
            detail={"error": result.error_kind, "message": result.message},
        )


# Request/Response Models
class PinRequest(BaseModel):
    pin: str = Field(..., min_length=1)


class AddEntryRequest(BaseModel):
    platform: str = Field(..., min_length=1, max_length=200)
    identifier: str = Field("", max_length=320)
    secret: str = Field(..., min_length=1)
    note: str = ""


class VaultStatusResponse(BaseModel):
    lock_state: str
    pin_configured: bool
    unlocked_since: Optional[str]
    auto_lock_seconds: float
    entry_count: int
    min_pin_length: int = MIN_PIN_LENGTH


class EntryResponse(BaseModel):
    id: str
    platform: str
    identifier: str
    note: str
    payload: str


# Endpoints

@router.get("/status", response_model=VaultStatusResponse)
async def get_vault_status(token: str = Depends(verify_session_token)):
    """Current lock state and entry count."""
    return VaultStatusResponse(**get_vault_manager().status())


@router.post("/pin")
async def bootstrap_pin(
    request: PinRequest,
    token: str = Depends(verify_session_token)
):
    """
    Set the vault PIN (at least 4 characters) and unlock.

    Replacing an existing PIN requires an unlocked vault (403 otherwise).
    Setting a new PIN does not re-encrypt existing entries.
    """
    result = get_vault_manager().bootstrap_pin(request.pin)
    _raise_for(result)
    return {"success": True, "lock_state": result.value.value}


@router.post("/unlock")
async def unlock_vault(
    request: PinRequest,
    token: str = Depends(verify_session_token)
):
    """Unlock vault with the PIN."""
    result = get_vault_manager().unlock(request.pin)
    _raise_for(result)
    return {"success": True, "lock_state": result.value.value}


@router.post("/lock")
async def lock_vault(token: str = Depends(verify_session_token)):
    """Lock vault. Idempotent."""
    result = get_vault_manager().lock()
    return {"success": True, "lock_state": result.value.value}


@router.get("/entries")
async def list_entries(
    q: Optional[str] = None,
    token: str = Depends(verify_session_token)
):
    """
    List entries, optionally filtered by platform/identifier.

    Secrets are not included; use GET /entries/{id}/secret.
    """
    manager = get_vault_manager()
    entries = manager.search_entries(q) if q else manager.list_entries()
    return {"entries": [EntryResponse(**entry.summary()) for entry in entries]}


@router.post("/entries")
async def add_entry(
    request: AddEntryRequest,
    token: str = Depends(verify_session_token)
):
    """Add a credential (encrypted when a PIN is configured)."""
    result = get_vault_manager().add_entry(
        platform=request.platform,
        identifier=request.identifier,
        secret=request.secret,
        note=request.note,
    )
    _raise_for(result)
    return {"success": True, "entry": EntryResponse(**result.value.summary())}


@router.get("/entries/{entry_id}/secret")
async def reveal_secret(
    entry_id: str,
    token: str = Depends(verify_session_token)
):
    """Reveal one secret. Requires the vault to be unlocked."""
    result = get_vault_manager().reveal_secret(entry_id)
    _raise_for(result)
    return {"id": entry_id, "secret": result.value}


@router.delete("/entries/{entry_id}")
async def remove_entry(
    entry_id: str,
    token: str = Depends(verify_session_token)
):
    """Remove an entry. Removing an unknown id is not an error."""
    result = get_vault_manager().remove_entry(entry_id)
    return {"success": True, "removed": result.value}
