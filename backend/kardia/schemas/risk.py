"""Risk calculation input and output schemas."""

from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, model_validator

from kardia.core.exceptions import DiagnosisAgeError
from kardia.schemas.base import (
    InputMode,
    RiskCategory,
    RiskModel,
    RiskRegion,
    Sex,
    SmokingStatus,
)

# Parameters every answer set carries, and those only diabetic answer sets carry
CORE_PARAMETERS = ("sbp", "tchol", "hdl")
DIABETES_PARAMETERS = ("hba1c", "scr")

# Accepted ranges for manually entered values (inclusive)
MANUAL_VALUE_BOUNDS: dict[str, tuple[float, float]] = {
    "sbp": (50, 300),  # mmHg
    "tchol": (1, 20),  # mmol/L
    "hdl": (0.1, 5),  # mmol/L
    "hba1c": (20, 200),  # mmol/mol
    "scr": (0.1, 15),  # mg/dL
}


class ClinicalProfile(BaseModel):
    """Minimal demographic profile of the person being assessed."""

    age: int = Field(..., ge=0, le=130, description="Age in completed years")
    sex: Sex = Field(..., description="Biological sex")
    country_of_residence: str = Field(..., description="Country name, mapped to a risk region")

    model_config = {"frozen": True}

    @classmethod
    def from_date_of_birth(
        cls,
        date_of_birth: date,
        sex: Sex | str,
        country_of_residence: str,
        today: date | None = None,
    ) -> "ClinicalProfile":
        """Build a profile, deriving age in completed years from a birth date."""
        today = today or date.today()
        age = today.year - date_of_birth.year
        if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
            age -= 1
        return cls(age=age, sex=sex, country_of_residence=country_of_residence)


class ParameterInput(BaseModel):
    """One clinical parameter, either measured or to be estimated."""

    input_type: InputMode = Field(..., description="manual or proxy")
    value: float | None = Field(None, description="Measured value (manual mode)")
    proxy_answers: dict[str, Any] | None = Field(
        None, description="Question id to categorical answer (proxy mode)"
    )

    model_config = {"frozen": True}


class RawAnswerSet(BaseModel):
    """Answers supplied by the caller for a single risk calculation.

    This model only checks types. Presence and range rules live in
    RiskAssessmentRequest; the engine itself raises on missing inputs.
    """

    has_diabetes: bool = Field(..., description="Diagnosed diabetes")
    smoking_status: SmokingStatus = Field(..., description="Current smoking status")
    sbp: ParameterInput | None = Field(None, description="Systolic blood pressure (mmHg)")
    tchol: ParameterInput | None = Field(None, description="Total cholesterol (mmol/L)")
    hdl: ParameterInput | None = Field(None, description="HDL cholesterol (mmol/L)")
    hba1c: ParameterInput | None = Field(None, description="HbA1c (mmol/mol), diabetic only")
    scr: ParameterInput | None = Field(None, description="Serum creatinine (mg/dL), diabetic only")
    age_at_diabetes_diagnosis: int | None = Field(None, description="Diabetic only")

    model_config = {"frozen": True}

    @property
    def is_smoker(self) -> bool:
        """Check if the person currently smokes."""
        return self.smoking_status == SmokingStatus.ACTIVE

    @classmethod
    def from_flat(cls, data: Mapping[str, Any]) -> "RawAnswerSet":
        """Parse the flat request shape (``sbp_input_type``, ``sbp_value``, ...).

        Args:
            data: Flat mapping as submitted by a questionnaire form.

        Returns:
            An instance of the class this is called on.
        """
        payload: dict[str, Any] = {
            key: data[key]
            for key in ("has_diabetes", "smoking_status", "age_at_diabetes_diagnosis")
            if key in data
        }
        for name in CORE_PARAMETERS + DIABETES_PARAMETERS:
            input_type = data.get(f"{name}_input_type")
            if input_type is None:
                continue
            payload[name] = {
                "input_type": input_type,
                "value": data.get(f"{name}_value"),
                "proxy_answers": data.get(f"{name}_proxy_answers"),
            }
        return cls.model_validate(payload)


class RiskAssessmentRequest(RawAnswerSet):
    """Validated answer set, as accepted from an external caller.

    Adds the presence rules (value iff manual, answers iff proxy, diabetic
    parameters iff has_diabetes) and the accepted manual value ranges.
    """

    age_at_diabetes_diagnosis: int | None = Field(None, ge=1, description="Diabetic only")

    @model_validator(mode="after")
    def check_parameters(self) -> "RiskAssessmentRequest":
        """Validate each parameter against its input mode."""
        for name in CORE_PARAMETERS:
            _check_parameter(name, getattr(self, name))

        if self.has_diabetes:
            if self.age_at_diabetes_diagnosis is None:
                raise ValueError("age_at_diabetes_diagnosis is required when has_diabetes is true")
            for name in DIABETES_PARAMETERS:
                _check_parameter(name, getattr(self, name))

        return self

    def validate_against_profile(self, profile: ClinicalProfile) -> None:
        """Check rules that need the profile.

        Raises:
            DiagnosisAgeError: If diabetes was diagnosed after the current age.
        """
        if (
            self.has_diabetes
            and self.age_at_diabetes_diagnosis is not None
            and self.age_at_diabetes_diagnosis > profile.age
        ):
            raise DiagnosisAgeError(self.age_at_diabetes_diagnosis, profile.age)


def _check_parameter(name: str, parameter: ParameterInput | None) -> None:
    if parameter is None:
        raise ValueError(f"{name}_input_type is required")

    if parameter.input_type == InputMode.MANUAL:
        if parameter.value is None:
            raise ValueError(f"{name}_value is required when {name}_input_type is manual")
        low, high = MANUAL_VALUE_BOUNDS[name]
        if not low <= parameter.value <= high:
            raise ValueError(f"{name}_value must be between {low} and {high}")
    elif parameter.proxy_answers is None:
        raise ValueError(f"{name}_proxy_answers is required when {name}_input_type is proxy")


class ClinicalValues(BaseModel):
    """Uniform clinical values fed to the risk models.

    Diabetes-only fields are set iff has_diabetes is true. ``egfr`` is
    filled in by the diabetes model after it is derived from ``scr``.
    """

    age: int = Field(..., description="Age in years")
    sex: Sex = Field(..., description="Biological sex")
    is_smoker: bool = Field(..., description="Current smoker")
    has_diabetes: bool = Field(..., description="Diagnosed diabetes")
    sbp: float = Field(..., description="Systolic blood pressure (mmHg)")
    tchol: float = Field(..., description="Total cholesterol (mmol/L)")
    hdl: float = Field(..., description="HDL cholesterol (mmol/L)")
    age_at_diabetes_diagnosis: int | None = Field(None, description="Age at diagnosis (years)")
    hba1c: float | None = Field(None, description="HbA1c (mmol/mol)")
    scr: float | None = Field(None, description="Serum creatinine (mg/dL)")
    egfr: float | None = Field(None, description="eGFR (mL/min/1.73m²), diabetes model only")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_diabetes_fields(self) -> "ClinicalValues":
        """Diabetes-only fields must match has_diabetes."""
        diabetic_fields = {
            "age_at_diabetes_diagnosis": self.age_at_diabetes_diagnosis,
            "hba1c": self.hba1c,
            "scr": self.scr,
        }
        if self.has_diabetes:
            missing = [name for name, value in diabetic_fields.items() if value is None]
            if missing:
                raise ValueError(f"Diabetic values missing: {', '.join(missing)}")
        else:
            diabetic_fields["egfr"] = self.egfr
            present = [name for name, value in diabetic_fields.items() if value is not None]
            if present:
                raise ValueError(f"Diabetes-only values set without diabetes: {', '.join(present)}")
        return self


class RiskResult(BaseModel):
    """Outcome of a risk calculation."""

    determined_risk_region: RiskRegion = Field(..., description="Calibration region used")
    model_used: RiskModel = Field(..., description="Risk model variant used")
    calibrated_10_year_risk_percent: float = Field(
        ..., ge=0.0, le=100.0, description="Calibrated 10-year CVD risk (%)"
    )
    risk_category: RiskCategory = Field(..., description="Age-stratified risk category")
    final_clinical_inputs: ClinicalValues = Field(..., description="Values the model used")
    estimated_parameters: list[str] = Field(
        default_factory=list, description="Parameters estimated from proxy answers"
    )

    @property
    def model_display_name(self) -> str:
        """Published name of the model used."""
        return self.model_used.display_name
