# Core Module - Shared Utilities
#
# Core module provides shared functionality across EagleDash modules:
# - Audit logging
# - Configuration
# - Application state persistence

from .audit_log import (
    AuditLogger,
    EventSeverity,
    EventType,
    get_audit_logger,
    log_security_event,
)
from .config import Settings, get_settings, load_settings
from .state_store import AppStateStore

__all__ = [
    # Audit Logging
    "AuditLogger",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
    "log_security_event",
    # Configuration
    "Settings",
    "get_settings",
    "load_settings",
    # Persistence
    "AppStateStore",
]
