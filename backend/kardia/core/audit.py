"""Audit logging for risk calculations.

Every completed calculation emits one audit event on the ``audit`` logger.
Events carry only non-identifying data: the model and region used, the
patient's sex and age band, the rounded risk, and which parameters were
estimated from proxy answers rather than measured.
"""

import logging
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# Separate audit logger for calculation events
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    CALCULATE = "calculate"
    VALIDATION_FAILURE = "validation_failure"
    ERROR = "error"


class AuditEvent(BaseModel):
    """Audit event record."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Type of resource produced or checked")
    model_used: str | None = Field(None, description="Risk model that produced the result")
    risk_region: str | None = Field(None, description="Calibration region applied")
    details: dict | None = Field(None, description="Additional context")
    success: bool = Field(True, description="Whether action succeeded")


def log_audit(
    action: AuditAction,
    resource_type: str,
    model_used: str | None = None,
    risk_region: str | None = None,
    details: dict | None = None,
    success: bool = True,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: The type of resource produced or checked
        model_used: Risk model name, if a calculation ran
        risk_region: Calibration region, if resolved
        details: Additional context (must not contain identifying data)
        success: Whether the action succeeded

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        model_used=model_used,
        risk_region=risk_region,
        details=details,
        success=success,
    )

    log_level = logging.INFO if success else logging.WARNING
    audit_logger.log(
        log_level,
        f"AUDIT: {action.value} {resource_type}"
        f"{f' model={model_used}' if model_used else ''}"
        f"{f' region={risk_region}' if risk_region else ''}"
        f" success={success}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_risk_calculation(
    model_used: str,
    risk_region: str,
    risk_percent: float,
    sex: str,
    age: int,
    estimated_parameters: list[str],
) -> AuditEvent:
    """Log a completed risk calculation.

    Age is reduced to a decade band before logging.

    Args:
        model_used: Risk model name
        risk_region: Calibration region applied
        risk_percent: Calibrated 10-year risk in percent
        sex: Patient sex
        age: Patient age in years
        estimated_parameters: Parameters resolved from proxy answers

    Returns:
        The created AuditEvent
    """
    decade = (age // 10) * 10
    return log_audit(
        action=AuditAction.CALCULATE,
        resource_type="risk_result",
        model_used=model_used,
        risk_region=risk_region,
        details={
            "risk_percent": risk_percent,
            "sex": sex,
            "age_band": f"{decade}-{decade + 9}",
            "estimated_parameters": list(estimated_parameters),
        },
    )
