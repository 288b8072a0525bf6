"""Core configuration and audit utilities."""

from kardia.core.audit import AuditAction, AuditEvent, log_audit, log_risk_calculation
from kardia.core.config import Settings, settings

__all__ = [
    # Config
    "Settings",
    "settings",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_risk_calculation",
]
