"""Pydantic schemas and enums for the Kardia risk engine."""

from kardia.schemas.base import (
    InputMode,
    RiskCategory,
    RiskModel,
    RiskRegion,
    Sex,
    SmokingStatus,
)
from kardia.schemas.risk import (
    ClinicalProfile,
    ClinicalValues,
    ParameterInput,
    RawAnswerSet,
    RiskAssessmentRequest,
    RiskResult,
)

__all__ = [
    # Enums
    "InputMode",
    "RiskCategory",
    "RiskModel",
    "RiskRegion",
    "Sex",
    "SmokingStatus",
    # Inputs
    "ClinicalProfile",
    "ParameterInput",
    "RawAnswerSet",
    "RiskAssessmentRequest",
    # Outputs
    "ClinicalValues",
    "RiskResult",
]
