"""Clinical Risk Service.

Computes calibrated 10-year cardiovascular risk with the SCORE2 family:

- SCORE2 for people under 70 without diabetes
- SCORE2-OP for people aged 70 and over without diabetes
- SCORE2-Diabetes for people with diabetes, at any age

Each model computes a linear predictor from centered and scaled risk
factors, turns it into an uncalibrated risk through the baseline survival,
and recalibrates that risk to the region and sex with a complementary
log-log transform.
"""

import logging
import math
from dataclasses import dataclass
from threading import Lock
from typing import Any

from kardia.core.audit import log_risk_calculation
from kardia.core.config import settings
from kardia.core.rounding import round_half_up
from kardia.schemas.base import RiskCategory, RiskModel, RiskRegion, Sex
from kardia.schemas.risk import (
    ClinicalProfile,
    ClinicalValues,
    RawAnswerSet,
    RiskAssessmentRequest,
    RiskResult,
)
from kardia.services.region_mapping import resolve_region
from kardia.services.score_models import (
    SCORE2,
    SCORE2_DIABETES,
    SCORE2_OP,
    Score2Coefficients,
    Score2DiabetesCoefficients,
    Score2OPCoefficients,
    get_model_constants,
)
from kardia.services.value_resolver import estimated_parameters, resolve_clinical_values

logger = logging.getLogger(__name__)

OLDER_PERSONS_AGE = 70


@dataclass
class ModelOutput:
    """Intermediate and final values from one model run."""

    model: RiskModel
    linear_predictor: float
    uncalibrated_risk: float
    risk_percent: float
    egfr: float | None = None


# ============================================================================
# Model Selection
# ============================================================================

def select_model(values: ClinicalValues) -> RiskModel:
    """Select the model variant. Diabetes takes precedence over age."""
    if values.has_diabetes:
        return RiskModel.SCORE2_DIABETES
    if values.age >= OLDER_PERSONS_AGE:
        return RiskModel.SCORE2_OP
    return RiskModel.SCORE2


# ============================================================================
# CKD-EPI eGFR (2021, race-free)
# ============================================================================

def calculate_egfr(scr: float, age: int, sex: Sex) -> float:
    """Calculate eGFR with the 2021 CKD-EPI creatinine equation.

    eGFR = 142 × (Scr/κ)^α × 0.9938^age × 1.012 [if female], where κ is
    0.7 (female) or 0.9 (male) and α switches to -1.2 above κ.

    Args:
        scr: Serum creatinine in mg/dL.
        age: Age in years.
        sex: Biological sex.

    Returns:
        eGFR in mL/min/1.73m², never below 0.1.
    """
    if sex == Sex.FEMALE:
        kappa = 0.7
        alpha = -0.241 if scr <= kappa else -1.2
    else:
        kappa = 0.9
        alpha = -0.302 if scr <= kappa else -1.2

    egfr = 142 * (scr / kappa) ** alpha * 0.9938 ** age
    if sex == Sex.FEMALE:
        egfr *= 1.012

    # Floor keeps log(eGFR) defined downstream
    return egfr if egfr > 0 else 0.1


# ============================================================================
# Linear Predictors
# ============================================================================

def score2_linear_predictor(values: ClinicalValues, coef: Score2Coefficients) -> float:
    """SCORE2 linear predictor."""
    cage = (values.age - 60) / 5
    csbp = (values.sbp - 120) / 20
    ctchol = values.tchol - 6
    chdl = (values.hdl - 1.3) / 0.5
    smoking = 1 if values.is_smoker else 0

    return (
        coef.age * cage
        + coef.smoking * smoking
        + coef.sbp * csbp
        + coef.tchol * ctchol
        + coef.hdl * chdl
        + coef.smoking_age * smoking * cage
        + coef.sbp_age * csbp * cage
        + coef.tchol_age * ctchol * cage
        + coef.hdl_age * chdl * cage
    )


def score2_op_linear_predictor(values: ClinicalValues, coef: Score2OPCoefficients) -> float:
    """SCORE2-OP linear predictor. Values are centered but not scaled."""
    cage = values.age - 73
    csbp = values.sbp - 150
    ctchol = values.tchol - 6
    chdl = values.hdl - 1.4
    smoking = 1 if values.is_smoker else 0
    diabetes = 1 if values.has_diabetes else 0

    return (
        coef.age * cage
        + coef.diabetes * diabetes
        + coef.smoking * smoking
        + coef.sbp * csbp
        + coef.tchol * ctchol
        + coef.hdl * chdl
        + coef.diabetes_age * diabetes * cage
        + coef.smoking_age * smoking * cage
        + coef.sbp_age * csbp * cage
        + coef.tchol_age * ctchol * cage
        + coef.hdl_age * chdl * cage
    )


def score2_diabetes_linear_predictor(
    values: ClinicalValues,
    coef: Score2DiabetesCoefficients,
    egfr: float,
) -> float:
    """SCORE2-Diabetes linear predictor.

    Adds age at diagnosis, HbA1c, log-eGFR and its square, and their age
    interactions to the SCORE2 terms. The diabetes indicator is always 1.
    """
    cage = (values.age - 60) / 5
    csbp = (values.sbp - 120) / 20
    ctchol = values.tchol - 6
    chdl = (values.hdl - 1.3) / 0.5
    smoking = 1 if values.is_smoker else 0
    diabetes = 1
    cagediab = (values.age_at_diabetes_diagnosis - 50) / 5
    ca1c = (values.hba1c - 31) / 9.34
    cegfr = (math.log(egfr) - 4.5) / 0.15

    return (
        coef.age * cage
        + coef.smoking * smoking
        + coef.sbp * csbp
        + coef.diabetes * diabetes
        + coef.tchol * ctchol
        + coef.hdl * chdl
        + coef.smoking_age * smoking * cage
        + coef.sbp_age * csbp * cage
        + coef.diabetes_age * diabetes * cage
        + coef.tchol_age * ctchol * cage
        + coef.hdl_age * chdl * cage
        + coef.age_at_diabetes_diagnosis * cagediab
        + coef.hba1c * ca1c
        + coef.egfr * cegfr
        + coef.egfr2 * cegfr ** 2
        + coef.hba1c_age * ca1c * cage
        + coef.egfr_age * cegfr * cage
    )


# ============================================================================
# Risk Transform & Calibration
# ============================================================================

def uncalibrated_risk(
    linear_predictor: float,
    baseline_survival: float,
    mean_linear_predictor: float = 0.0,
) -> float:
    """Convert a linear predictor into a 10-year risk (0-1).

    risk = 1 - S0^exp(x - mean_linear_predictor)
    """
    return 1 - baseline_survival ** math.exp(linear_predictor - mean_linear_predictor)


def calibrate(uncalibrated: float, region: RiskRegion, sex: Sex, model: RiskModel) -> float:
    """Recalibrate a risk to the observed incidence of a region.

    calibrated = 1 - exp(-exp(scale1 + scale2 × ln(-ln(1 - risk))))

    Risks at or beyond the (0, 1) bounds short-circuit to 0% or 100%
    without evaluating the logarithms.

    Args:
        uncalibrated: Uncalibrated risk as a fraction.
        region: Calibration region.
        sex: Biological sex.
        model: Model whose scale table is used.

    Returns:
        Calibrated risk in percent, rounded to 2 decimals.
    """
    if uncalibrated >= 1.0:
        return 100.0
    if uncalibrated <= 0.0 or 1 - uncalibrated >= 1.0:
        return 0.0

    scale1, scale2 = get_model_constants(model).calibration_scales[region][sex]
    calibrated = 1 - math.exp(-math.exp(scale1 + scale2 * math.log(-math.log(1 - uncalibrated))))

    return round_half_up(calibrated * 100, 2)


# ============================================================================
# Model Calculators
# ============================================================================

def calculate_score2(values: ClinicalValues, region: RiskRegion) -> ModelOutput:
    """Run SCORE2 (age under 70, no diabetes)."""
    sex = values.sex
    x = score2_linear_predictor(values, SCORE2.coefficients[sex])
    risk = uncalibrated_risk(x, SCORE2.baseline_survival[sex])

    return ModelOutput(
        model=RiskModel.SCORE2,
        linear_predictor=x,
        uncalibrated_risk=risk,
        risk_percent=calibrate(risk, region, sex, RiskModel.SCORE2),
    )


def calculate_score2_op(values: ClinicalValues, region: RiskRegion) -> ModelOutput:
    """Run SCORE2-OP (age 70 and over, no diabetes)."""
    sex = values.sex
    x = score2_op_linear_predictor(values, SCORE2_OP.coefficients[sex])
    risk = uncalibrated_risk(
        x,
        SCORE2_OP.baseline_survival[sex],
        SCORE2_OP.mean_linear_predictor[sex],
    )

    return ModelOutput(
        model=RiskModel.SCORE2_OP,
        linear_predictor=x,
        uncalibrated_risk=risk,
        risk_percent=calibrate(risk, region, sex, RiskModel.SCORE2_OP),
    )


def calculate_score2_diabetes(values: ClinicalValues, region: RiskRegion) -> ModelOutput:
    """Run SCORE2-Diabetes. eGFR is derived from serum creatinine first."""
    sex = values.sex
    egfr = calculate_egfr(values.scr, values.age, sex)
    x = score2_diabetes_linear_predictor(values, SCORE2_DIABETES.coefficients[sex], egfr)
    risk = uncalibrated_risk(x, SCORE2_DIABETES.baseline_survival[sex])

    return ModelOutput(
        model=RiskModel.SCORE2_DIABETES,
        linear_predictor=x,
        uncalibrated_risk=risk,
        risk_percent=calibrate(risk, region, sex, RiskModel.SCORE2_DIABETES),
        egfr=egfr,
    )


# ============================================================================
# Risk Categories
# ============================================================================

def classify_risk_category(age: int, risk_percent: float) -> RiskCategory:
    """Classify a calibrated risk into the age-stratified ESC 2021 bands.

    | age   | lowest band         | high     | very high |
    |-------|---------------------|----------|-----------|
    | < 50  | < 2.5  low-moderate | 2.5-7.5  | >= 7.5    |
    | 50-69 | < 5    low-moderate | 5-10     | >= 10     |
    | >= 70 | < 7.5  moderate     | 7.5-15   | >= 15     |
    """
    if age < 50:
        lowest, high, very_high = RiskCategory.LOW_MODERATE, 2.5, 7.5
    elif age < OLDER_PERSONS_AGE:
        lowest, high, very_high = RiskCategory.LOW_MODERATE, 5.0, 10.0
    else:
        lowest, high, very_high = RiskCategory.MODERATE, 7.5, 15.0

    if risk_percent >= very_high:
        return RiskCategory.VERY_HIGH
    if risk_percent >= high:
        return RiskCategory.HIGH
    return lowest


# ============================================================================
# Risk Service
# ============================================================================

class ClinicalRiskService:
    """Service for SCORE2-family risk calculations.

    Stateless apart from its settings; safe to share across threads.

    Usage:
        service = ClinicalRiskService()
        result = service.compute_risk(answers, profile)
        print(result.model_used, result.calibrated_10_year_risk_percent)
    """

    MODELS = {
        RiskModel.SCORE2: calculate_score2,
        RiskModel.SCORE2_OP: calculate_score2_op,
        RiskModel.SCORE2_DIABETES: calculate_score2_diabetes,
    }

    def __init__(
        self,
        fallback_region: RiskRegion | None = None,
        audit_enabled: bool | None = None,
    ) -> None:
        """Initialize the risk service.

        Args:
            fallback_region: Region for unmapped countries (default from settings).
            audit_enabled: Emit audit events (default from settings).
        """
        self.fallback_region = fallback_region or settings.fallback_risk_region
        self.audit_enabled = settings.audit_enabled if audit_enabled is None else audit_enabled

    def resolve_region(self, country_name: str) -> RiskRegion:
        """Resolve the calibration region for a country."""
        return resolve_region(country_name, default=self.fallback_region)

    def run_model(
        self,
        model: RiskModel,
        values: ClinicalValues,
        region: RiskRegion,
    ) -> ModelOutput:
        """Run one model variant on resolved clinical values."""
        output = self.MODELS[model](values, region)
        logger.debug(
            f"{model.display_name}: x={output.linear_predictor:.4f} "
            f"risk={output.uncalibrated_risk:.4f} calibrated={output.risk_percent}%"
        )
        return output

    def compute_risk(self, answers: RawAnswerSet, profile: ClinicalProfile) -> RiskResult:
        """Compute the calibrated 10-year CVD risk.

        Args:
            answers: Raw answer set. A RiskAssessmentRequest is additionally
                checked against the profile.
            profile: Demographic profile.

        Returns:
            RiskResult with the region, model, calibrated risk and the
            clinical values used.

        Raises:
            MissingClinicalInputError: If a required value or answer map is missing.
            DiagnosisAgeError: If a RiskAssessmentRequest has diabetes
                diagnosed after the current age.
        """
        if isinstance(answers, RiskAssessmentRequest):
            answers.validate_against_profile(profile)

        region = self.resolve_region(profile.country_of_residence)
        values = resolve_clinical_values(answers, profile)
        model = select_model(values)
        output = self.run_model(model, values, region)

        if output.egfr is not None:
            values = values.model_copy(update={"egfr": output.egfr})

        estimated = estimated_parameters(answers)
        result = RiskResult(
            determined_risk_region=region,
            model_used=model,
            calibrated_10_year_risk_percent=output.risk_percent,
            risk_category=classify_risk_category(values.age, output.risk_percent),
            final_clinical_inputs=values,
            estimated_parameters=estimated,
        )

        if self.audit_enabled:
            log_risk_calculation(
                model_used=model.value,
                risk_region=region.value,
                risk_percent=output.risk_percent,
                sex=values.sex.value,
                age=values.age,
                estimated_parameters=estimated,
            )

        return result

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the available models.

        Returns:
            Dictionary with model statistics.
        """
        return {
            "total_models": len(self.MODELS),
            "model_list": [model.value for model in self.MODELS],
            "fallback_region": self.fallback_region.value,
        }


# Singleton instance and lock
_clinical_risk_service: ClinicalRiskService | None = None
_clinical_risk_lock = Lock()


def get_clinical_risk_service() -> ClinicalRiskService:
    """Get the singleton ClinicalRiskService instance.

    Returns:
        The singleton ClinicalRiskService instance.
    """
    global _clinical_risk_service

    if _clinical_risk_service is None:
        with _clinical_risk_lock:
            if _clinical_risk_service is None:
                logger.info("Creating singleton ClinicalRiskService instance")
                _clinical_risk_service = ClinicalRiskService()

    return _clinical_risk_service


def reset_clinical_risk_service() -> None:
    """Reset the singleton instance (for testing)."""
    global _clinical_risk_service
    with _clinical_risk_lock:
        _clinical_risk_service = None


def compute_risk(answers: RawAnswerSet, profile: ClinicalProfile) -> RiskResult:
    """Compute risk with the shared service instance."""
    return get_clinical_risk_service().compute_risk(answers, profile)
