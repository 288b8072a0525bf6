"""Services for the Kardia risk engine.

- region_mapping: country of residence to SCORE2 calibration region
- score_models: published SCORE2 / SCORE2-OP / SCORE2-Diabetes constants
- value_resolver: manual values and proxy estimators -> ClinicalValues
- clinical_risk: model selection, linear predictors, calibration
"""

from kardia.services.clinical_risk import (
    ClinicalRiskService,
    ModelOutput,
    calculate_egfr,
    calibrate,
    classify_risk_category,
    compute_risk,
    get_clinical_risk_service,
    reset_clinical_risk_service,
    select_model,
)
from kardia.services.region_mapping import REGION_COUNTRIES, resolve_region
from kardia.services.score_models import MODEL_CONSTANTS, ModelConstants, get_model_constants
from kardia.services.value_resolver import (
    estimate_hba1c,
    estimate_hdl,
    estimate_sbp,
    estimate_serum_creatinine,
    estimate_total_cholesterol,
    resolve_clinical_values,
)

__all__ = [
    # Risk
    "ClinicalRiskService",
    "ModelOutput",
    "calculate_egfr",
    "calibrate",
    "classify_risk_category",
    "compute_risk",
    "get_clinical_risk_service",
    "reset_clinical_risk_service",
    "select_model",
    # Regions
    "REGION_COUNTRIES",
    "resolve_region",
    # Model constants
    "MODEL_CONSTANTS",
    "ModelConstants",
    "get_model_constants",
    # Value resolution
    "estimate_hba1c",
    "estimate_hdl",
    "estimate_sbp",
    "estimate_serum_creatinine",
    "estimate_total_cholesterol",
    "resolve_clinical_values",
]
