# EagleDash - Main Package
#
# Personal study dashboard backend. This package holds the credential
# vault (PIN-derived AES-256-GCM encryption, lock/unlock lifecycle) and
# the ambient services it needs: audit log, configuration, state store
# and a local REST API.

__version__ = "0.3.0"
__author__ = "EagleDash Team"
__description__ = "Study dashboard with a PIN-protected credential vault"

from .core import (
    EventSeverity,
    EventType,
    get_audit_logger,
    get_settings,
)

__all__ = [
    "__version__",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
    "get_settings",
]
