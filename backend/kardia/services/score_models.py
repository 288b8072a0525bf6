"""SCORE2 model constants.

Coefficients, baseline survival, mean linear predictors and calibration
scales for SCORE2, SCORE2-OP and SCORE2-Diabetes, as published. These
values encode the clinical models and must not be edited.

References:
    SCORE2 working group. Eur Heart J 2021;42:2439-2454.
    SCORE2-OP working group. Eur Heart J 2021;42:2455-2467.
    SCORE2-Diabetes working group. Eur Heart J 2023;44:2544-2556.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from kardia.schemas.base import RiskModel, RiskRegion, Sex


# ============================================================================
# Coefficient Records
# ============================================================================

@dataclass(frozen=True)
class Score2Coefficients:
    """SCORE2 log hazard ratios."""

    age: float
    smoking: float
    sbp: float
    tchol: float
    hdl: float
    smoking_age: float
    sbp_age: float
    tchol_age: float
    hdl_age: float


@dataclass(frozen=True)
class Score2OPCoefficients:
    """SCORE2-OP log hazard ratios."""

    age: float
    diabetes: float
    smoking: float
    sbp: float
    tchol: float
    hdl: float
    diabetes_age: float
    smoking_age: float
    sbp_age: float
    tchol_age: float
    hdl_age: float


@dataclass(frozen=True)
class Score2DiabetesCoefficients:
    """SCORE2-Diabetes log hazard ratios."""

    age: float
    smoking: float
    sbp: float
    diabetes: float
    tchol: float
    hdl: float
    smoking_age: float
    sbp_age: float
    diabetes_age: float
    tchol_age: float
    hdl_age: float
    age_at_diabetes_diagnosis: float
    hba1c: float
    egfr: float
    egfr2: float
    hba1c_age: float
    egfr_age: float


CalibrationScales = Mapping[RiskRegion, Mapping[Sex, tuple[float, float]]]


@dataclass(frozen=True)
class ModelConstants:
    """All constants for one model variant."""

    coefficients: Mapping[Sex, Score2Coefficients | Score2OPCoefficients | Score2DiabetesCoefficients]
    baseline_survival: Mapping[Sex, float]
    calibration_scales: CalibrationScales
    mean_linear_predictor: Mapping[Sex, float] | None = None


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


# ============================================================================
# Calibration Scales
# ============================================================================

# (scale1, scale2) per region and sex
SCORE2_CALIBRATION_SCALES: CalibrationScales = _frozen({
    RiskRegion.LOW: _frozen({Sex.MALE: (-0.5699, 0.7476), Sex.FEMALE: (-0.7380, 0.7019)}),
    RiskRegion.MODERATE: _frozen({Sex.MALE: (-0.1565, 0.8009), Sex.FEMALE: (-0.3143, 0.7701)}),
    RiskRegion.HIGH: _frozen({Sex.MALE: (0.3207, 0.9360), Sex.FEMALE: (0.5710, 0.9369)}),
    RiskRegion.VERY_HIGH: _frozen({Sex.MALE: (0.5836, 0.8294), Sex.FEMALE: (0.9412, 0.8329)}),
})

SCORE2_OP_CALIBRATION_SCALES: CalibrationScales = _frozen({
    RiskRegion.LOW: _frozen({Sex.MALE: (-0.34, 1.19), Sex.FEMALE: (-0.52, 1.01)}),
    RiskRegion.MODERATE: _frozen({Sex.MALE: (0.01, 1.25), Sex.FEMALE: (-0.10, 1.10)}),
    RiskRegion.HIGH: _frozen({Sex.MALE: (0.08, 1.15), Sex.FEMALE: (0.38, 1.09)}),
    RiskRegion.VERY_HIGH: _frozen({Sex.MALE: (0.05, 0.70), Sex.FEMALE: (0.38, 0.69)}),
})


# ============================================================================
# SCORE2 (age 40-69, no diabetes)
# ============================================================================

SCORE2 = ModelConstants(
    coefficients=_frozen({
        Sex.MALE: Score2Coefficients(
            age=0.3742,
            smoking=0.6012,
            sbp=0.2777,
            tchol=0.1458,
            hdl=-0.2698,
            smoking_age=-0.0755,
            sbp_age=-0.0255,
            tchol_age=-0.0281,
            hdl_age=0.0426,
        ),
        Sex.FEMALE: Score2Coefficients(
            age=0.4648,
            smoking=0.7744,
            sbp=0.3131,
            tchol=0.1002,
            hdl=-0.2606,
            smoking_age=-0.1088,
            sbp_age=-0.0277,
            tchol_age=-0.0226,
            hdl_age=0.0613,
        ),
    }),
    baseline_survival=_frozen({Sex.MALE: 0.9605, Sex.FEMALE: 0.9776}),
    calibration_scales=SCORE2_CALIBRATION_SCALES,
)


# ============================================================================
# SCORE2-OP (age >= 70, no diabetes)
# ============================================================================

SCORE2_OP = ModelConstants(
    coefficients=_frozen({
        Sex.MALE: Score2OPCoefficients(
            age=0.0634,
            diabetes=0.4245,
            smoking=0.3524,
            sbp=0.0094,
            tchol=0.0850,
            hdl=-0.3564,
            diabetes_age=-0.0174,
            smoking_age=-0.0247,
            sbp_age=-0.0005,
            tchol_age=0.0073,
            hdl_age=0.0091,
        ),
        Sex.FEMALE: Score2OPCoefficients(
            age=0.0789,
            diabetes=0.6010,
            smoking=0.4921,
            sbp=0.0102,
            tchol=0.0605,
            hdl=-0.3040,
            diabetes_age=-0.0107,
            smoking_age=-0.0255,
            sbp_age=-0.0004,
            tchol_age=-0.0009,
            hdl_age=0.0154,
        ),
    }),
    baseline_survival=_frozen({Sex.MALE: 0.7576, Sex.FEMALE: 0.8082}),
    mean_linear_predictor=_frozen({Sex.MALE: 0.0929, Sex.FEMALE: 0.2290}),
    calibration_scales=SCORE2_OP_CALIBRATION_SCALES,
)


# ============================================================================
# SCORE2-Diabetes
# ============================================================================

SCORE2_DIABETES = ModelConstants(
    coefficients=_frozen({
        Sex.MALE: Score2DiabetesCoefficients(
            age=0.5368,
            smoking=0.4774,
            sbp=0.1322,
            diabetes=0.6457,
            tchol=0.1102,
            hdl=-0.1087,
            smoking_age=-0.0672,
            sbp_age=-0.0268,
            diabetes_age=-0.0983,
            tchol_age=-0.0181,
            hdl_age=0.0095,
            age_at_diabetes_diagnosis=-0.0998,
            hba1c=0.0955,
            egfr=-0.0591,
            egfr2=0.0058,
            hba1c_age=-0.0134,
            egfr_age=0.0115,
        ),
        Sex.FEMALE: Score2DiabetesCoefficients(
            age=0.6624,
            smoking=0.6139,
            sbp=0.1421,
            diabetes=0.8096,
            tchol=0.1127,
            hdl=-0.1568,
            smoking_age=-0.1122,
            sbp_age=-0.0167,
            diabetes_age=-0.1272,
            tchol_age=-0.0200,
            hdl_age=0.0186,
            age_at_diabetes_diagnosis=-0.1180,
            hba1c=0.1173,
            egfr=-0.0640,
            egfr2=0.0062,
            hba1c_age=-0.0196,
            egfr_age=0.0169,
        ),
    }),
    baseline_survival=_frozen({Sex.MALE: 0.9605, Sex.FEMALE: 0.9776}),
    # Shares the SCORE2 calibration table
    calibration_scales=SCORE2_CALIBRATION_SCALES,
)


MODEL_CONSTANTS: Mapping[RiskModel, ModelConstants] = _frozen({
    RiskModel.SCORE2: SCORE2,
    RiskModel.SCORE2_OP: SCORE2_OP,
    RiskModel.SCORE2_DIABETES: SCORE2_DIABETES,
})


def get_model_constants(model: RiskModel) -> ModelConstants:
    """Get the constants for a model variant."""
    return MODEL_CONSTANTS[model]
