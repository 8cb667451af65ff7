# Core - Audit Logging
#
# Append-only structured audit log for vault activity.
# Every PIN bootstrap, unlock attempt, reveal and entry mutation is
# recorded with a timestamp and event ID. Secrets and PINs are never logged.

import logging
import os
import socket
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog

from .config import get_settings


class EventType(str, Enum):
    """Types of events recorded in the audit log."""
    # Vault Events
    VAULT_PIN_CONFIGURED = "vault.pin.configured"
    VAULT_UNLOCKED = "vault.unlocked"
    VAULT_LOCKED = "vault.locked"
    VAULT_AUTO_LOCKED = "vault.auto_locked"
    VAULT_UNLOCK_FAILED = "vault.unlock.failed"
    VAULT_ENTRY_ADDED = "vault.entry.added"
    VAULT_ENTRY_REVEALED = "vault.entry.revealed"
    VAULT_ENTRY_REMOVED = "vault.entry.removed"
    VAULT_REVEAL_FAILED = "vault.reveal.failed"
    VAULT_ERROR = "vault.error"

    # System Events
    SYSTEM_START = "system.start"
    SYSTEM_STOP = "system.stop"


class EventSeverity(str, Enum):
    """
    Severity levels for audit events.

    - INFO: Normal activity (logged only)
    - INVESTIGATE: Something unusual, e.g. a failed unlock
    - ALERT: Something the user should look at
    - CRITICAL: Unexpected failure inside the vault
    """
    INFO = "info"
    INVESTIGATE = "investigate"
    ALERT = "alert"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        """Map severity to a stdlib logging level."""
        level_map = {
            EventSeverity.INFO: logging.INFO,
            EventSeverity.INVESTIGATE: logging.WARNING,
            EventSeverity.ALERT: logging.WARNING,
            EventSeverity.CRITICAL: logging.ERROR,
        }
        return level_map[self]


class AuditLogger:
    """
    Append-only audit logger for vault events.

    Features:
    - Structured JSON logging (structlog)
    - Automatic timestamp and event ID
    - Daily log files under log_dir
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for audit logs (default: settings.audit_dir)
        """
        if log_dir is None:
            log_dir = get_settings().audit_dir
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )

        self.log_file = self._setup_file_handler()
        self.logger = structlog.get_logger("eagledash.audit")

    def _setup_file_handler(self) -> Path:
        """Attach a file handler for today's log file to the audit logger."""
        today = datetime.now().strftime("%Y-%m-%d")
        log_file = self.log_dir / f"audit_{today}.log"

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))  # structlog renders

        audit_logger = logging.getLogger("eagledash.audit")
        # One file handler at a time; a new AuditLogger replaces the old one
        for handler in list(audit_logger.handlers):
            if isinstance(handler, logging.FileHandler):
                audit_logger.removeHandler(handler)
                handler.close()
        audit_logger.addHandler(file_handler)
        audit_logger.setLevel(logging.INFO)
        return log_file

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log an audit event (append-only).

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets or PINs)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        event_data = {
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "message": message,
            "timestamp": datetime.utcnow().isoformat(),
            "details": details or {},
            "user_context": self._get_default_user_context(),
        }

        self.logger.log(severity.to_logging_level(), "audit_event", **event_data)

        return event_id

    def log_vault_event(
        self,
        event_type: EventType,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: EventSeverity = EventSeverity.INFO,
    ) -> str:
        """Log a vault event with a "Vault:" message prefix."""
        return self.log_event(
            event_type=event_type,
            severity=severity,
            message=f"Vault: {message}",
            details=details,
        )

    def _get_default_user_context(self) -> Dict[str, Any]:
        """Get default user context (OS user, hostname, platform)."""
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


def log_security_event(
    event_type: EventType,
    severity: EventSeverity,
    message: str,
    **kwargs
) -> str:
    """
    Convenience function for logging audit events.

    Usage:
        log_security_event(
            EventType.SYSTEM_START,
            EventSeverity.INFO,
            "EagleDash vault service starting",
        )
    """
    return get_audit_logger().log_event(event_type, severity, message, **kwargs)
