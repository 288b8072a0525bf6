"""Clinical value resolution.

Turns a raw answer set into the uniform ClinicalValues record used by the
risk models. Each parameter is either taken as measured (manual mode) or
estimated from categorical lifestyle answers (proxy mode).

Every proxy estimator is an independent additive score: a baseline from
age, sex or clinical domain, plus fixed deltas for matching answers.
Current smoking is the only input shared between estimators.

Each estimator reads only its own parameter's answer map. The intense
exercise answer (``q_exercise``) that lowers the HbA1c estimate is therefore
sent in ``hba1c_proxy_answers``; the same question in ``sbp_proxy_answers``
only affects SBP.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from kardia.core.exceptions import MissingClinicalInputError
from kardia.core.rounding import round_half_up
from kardia.schemas.base import InputMode, Sex
from kardia.schemas.proxy import (
    Adherence,
    BodyShape,
    BodyType,
    CookingOil,
    DiabetesControl,
    ExerciseFrequency,
    ExerciseType,
    FishIntake,
    FoamyUrine,
    GlucoseSelfMonitoring,
    ProxyQuestion,
    SleepPattern,
    StressResponse,
    UsageFrequency,
    YesNo,
)
from kardia.schemas.risk import (
    CORE_PARAMETERS,
    DIABETES_PARAMETERS,
    ClinicalProfile,
    ClinicalValues,
    ParameterInput,
    RawAnswerSet,
)

logger = logging.getLogger(__name__)

ProxyAnswers = Mapping[str, Any]


def _answer(answers: ProxyAnswers, question: ProxyQuestion, default: Any = None) -> Any:
    return answers.get(question.value, default)


# ============================================================================
# Systolic Blood Pressure
# ============================================================================

def estimate_sbp(answers: ProxyAnswers, profile: ClinicalProfile, is_smoker: bool) -> int:
    """Estimate systolic blood pressure (mmHg).

    Baseline rises 0.45 mmHg per year over age 25, +5 for men.

    Args:
        answers: SBP proxy answers.
        profile: Age and sex of the person.
        is_smoker: Current smoker.

    Returns:
        Estimated SBP, rounded to the nearest integer.
    """
    sbp = 110 + (profile.age - 25) * 0.45
    if profile.sex == Sex.MALE:
        sbp += 5

    if _answer(answers, ProxyQuestion.FAMILY_HYPERTENSION, YesNo.NO) == YesNo.YES:
        sbp += 7
    if _answer(answers, ProxyQuestion.SLEEP_PATTERN, SleepPattern.SOUND) == SleepPattern.INSOMNIA:
        sbp += 7

    # 5 mmHg per selected high-salt item
    salt_items = _answer(answers, ProxyQuestion.SALT_DIET)
    if isinstance(salt_items, (list, tuple)):
        sbp += len(salt_items) * 5

    if _answer(answers, ProxyQuestion.STRESS_RESPONSE) == StressResponse.PALPITATIONS:
        sbp += 10
    if is_smoker:
        sbp += 5
    if _answer(answers, ProxyQuestion.BODY_SHAPE, BodyShape.SLIM) == BodyShape.ABDOMINAL_OBESITY:
        sbp += 12

    if _answer(answers, ProxyQuestion.EXERCISE, ExerciseFrequency.RARELY) == ExerciseFrequency.REGULAR_INTENSE:
        sbp -= 7

    return int(round_half_up(sbp))


# ============================================================================
# Total Cholesterol
# ============================================================================

def estimate_total_cholesterol(answers: ProxyAnswers, is_smoker: bool) -> float:
    """Estimate total cholesterol (mmol/L) from a 4.0 mmol/L baseline."""
    tchol = 4.0

    if _answer(answers, ProxyQuestion.FAMILY_CHOLESTEROL_HEART_ATTACK, YesNo.NO) == YesNo.YES:
        tchol += 0.7
    if _answer(answers, ProxyQuestion.COOKING_OIL) == CookingOil.PALM_OR_BULK:
        tchol += 1.2
    if _answer(answers, ProxyQuestion.EXERCISE_TYPE) == ExerciseType.ALMOST_NEVER:
        tchol += 0.5
    if _answer(answers, ProxyQuestion.XANTHOMA, YesNo.NO) == YesNo.YES:
        tchol += 3.0
    if is_smoker:
        tchol += 0.4

    if _answer(answers, ProxyQuestion.FISH_INTAKE) == FishIntake.FREQUENT:
        tchol -= 0.3

    return round_half_up(tchol, 2)


# ============================================================================
# HDL Cholesterol
# ============================================================================

def estimate_hdl(answers: ProxyAnswers, sex: Sex, is_smoker: bool) -> float:
    """Estimate HDL cholesterol (mmol/L).

    Baseline is 1.3 for women and 1.1 for men. Exercise always moves the
    estimate: up for training, down when exercise is rare or unanswered.
    """
    hdl = 1.3 if sex == Sex.FEMALE else 1.1

    exercise_type = _answer(answers, ProxyQuestion.EXERCISE_TYPE, ExerciseType.ALMOST_NEVER)
    if exercise_type == ExerciseType.RESISTANCE_OR_HIIT:
        hdl += 0.3
    elif exercise_type == ExerciseType.LIGHT_ROUTINE:
        hdl += 0.1
    else:
        hdl -= 0.2

    if is_smoker:
        hdl -= 0.25

    if _answer(answers, ProxyQuestion.FISH_INTAKE, FishIntake.RARELY) == FishIntake.FREQUENT:
        hdl += 0.15

    return round_half_up(hdl, 2)


# ============================================================================
# Serum Creatinine
# ============================================================================

# Muscle mass scales the sex baseline
BODY_TYPE_FACTORS: dict[BodyType, float] = {
    BodyType.VERY_MUSCULAR: 1.20,
    BodyType.ATHLETIC: 1.10,
    BodyType.LEAN: 0.90,
    BodyType.AVERAGE: 1.00,
}

MAX_ESTIMATED_SCR = 4.0


def estimate_serum_creatinine(answers: ProxyAnswers, sex: Sex, is_smoker: bool) -> float:
    """Estimate serum creatinine (mg/dL) for a person with diabetes.

    The sex baseline (0.7 female, 0.9 male) is scaled by body type, then
    kidney damage points and stressor points are added. The result is kept
    between the scaled baseline and 4.0 mg/dL.

    Args:
        answers: Creatinine proxy answers.
        sex: Biological sex.
        is_smoker: Current smoker.

    Returns:
        Estimated creatinine, rounded to 2 decimals.
    """
    base_scr = 0.7 if sex == Sex.FEMALE else 0.9

    body_type = _answer(answers, ProxyQuestion.BODY_TYPE, BodyType.AVERAGE)
    base_scr *= BODY_TYPE_FACTORS.get(body_type, 1.0)

    damage_points = 0.0
    if _answer(answers, ProxyQuestion.DIABETES_CONTROL) == DiabetesControl.POOR:
        damage_points += 0.4
    if _answer(answers, ProxyQuestion.RETINOPATHY_NEUROPATHY, YesNo.NO) == YesNo.YES:
        damage_points += 0.3

    stressor_points = 0.0
    if is_smoker:
        stressor_points += 0.1
    if _answer(answers, ProxyQuestion.NSAID_USE, UsageFrequency.RARELY) == UsageFrequency.OFTEN:
        stressor_points += 0.15
    if _answer(answers, ProxyQuestion.FOAMY_URINE, FoamyUrine.NEVER) == FoamyUrine.FREQUENT:
        stressor_points += 0.25

    scr = base_scr + damage_points + stressor_points
    return round_half_up(max(base_scr, min(MAX_ESTIMATED_SCR, scr)), 2)


# ============================================================================
# HbA1c
# ============================================================================

SMBG_BASELINES: dict[GlucoseSelfMonitoring, int] = {
    GlucoseSelfMonitoring.NEVER: 65,
    GlucoseSelfMonitoring.ON_TARGET: 53,
    GlucoseSelfMonitoring.ABOVE_TARGET: 75,
}

ADHERENCE_PENALTIES: dict[Adherence, int] = {
    Adherence.DISCIPLINED: 0,
    Adherence.DIET_LAPSES: 10,
    Adherence.MEDICATION_LAPSES: 15,
    Adherence.UNDISCIPLINED: 25,
}

HBA1C_RANGE = (42, 160)


def estimate_hba1c(answers: ProxyAnswers) -> int:
    """Estimate HbA1c (mmol/mol) for a person with diabetes.

    Unanswered questions assume no self-monitoring and poor adherence.
    The estimate is clamped to 42-160 mmol/mol.
    """
    hba1c = SMBG_BASELINES.get(
        _answer(answers, ProxyQuestion.GLUCOSE_SELF_MONITORING, GlucoseSelfMonitoring.NEVER),
        SMBG_BASELINES[GlucoseSelfMonitoring.NEVER],
    )
    hba1c += ADHERENCE_PENALTIES.get(
        _answer(answers, ProxyQuestion.ADHERENCE, Adherence.UNDISCIPLINED),
        0,
    )

    if _answer(answers, ProxyQuestion.EXERCISE, ExerciseFrequency.RARELY) == ExerciseFrequency.REGULAR_INTENSE:
        hba1c -= 7

    low, high = HBA1C_RANGE
    return int(round_half_up(max(low, min(high, hba1c))))


# ============================================================================
# Resolution
# ============================================================================

def _resolve_parameter(
    name: str,
    parameter: ParameterInput | None,
    estimate: Callable[[ProxyAnswers], float],
) -> float:
    if parameter is None:
        raise MissingClinicalInputError(name, "no input supplied")

    if parameter.input_type == InputMode.MANUAL:
        if parameter.value is None:
            raise MissingClinicalInputError(name, "manual input without a value")
        return float(parameter.value)

    if parameter.proxy_answers is None:
        raise MissingClinicalInputError(name, "proxy input without answers")

    estimated = estimate(parameter.proxy_answers)
    logger.debug(f"Estimated {name}={estimated} from proxy answers")
    return estimated


def resolve_clinical_values(answers: RawAnswerSet, profile: ClinicalProfile) -> ClinicalValues:
    """Resolve the clinical values used by the risk models.

    Args:
        answers: Raw answer set.
        profile: Demographic profile.

    Returns:
        ClinicalValues with diabetic fields set iff has_diabetes.

    Raises:
        MissingClinicalInputError: If a parameter lacks the value or answers
            its input mode requires, or a diabetic answer set lacks age at
            diagnosis.
    """
    is_smoker = answers.is_smoker

    values: dict[str, Any] = {
        "age": profile.age,
        "sex": profile.sex,
        "is_smoker": is_smoker,
        "has_diabetes": answers.has_diabetes,
        "sbp": _resolve_parameter(
            "sbp", answers.sbp, lambda a: estimate_sbp(a, profile, is_smoker)
        ),
        "tchol": _resolve_parameter(
            "tchol", answers.tchol, lambda a: estimate_total_cholesterol(a, is_smoker)
        ),
        "hdl": _resolve_parameter(
            "hdl", answers.hdl, lambda a: estimate_hdl(a, profile.sex, is_smoker)
        ),
    }

    if answers.has_diabetes:
        if answers.age_at_diabetes_diagnosis is None:
            raise MissingClinicalInputError("age_at_diabetes_diagnosis", "required with diabetes")
        values["age_at_diabetes_diagnosis"] = int(answers.age_at_diabetes_diagnosis)
        values["hba1c"] = _resolve_parameter("hba1c", answers.hba1c, estimate_hba1c)
        values["scr"] = _resolve_parameter(
            "scr", answers.scr, lambda a: estimate_serum_creatinine(a, profile.sex, is_smoker)
        )

    return ClinicalValues(**values)


def estimated_parameters(answers: RawAnswerSet) -> list[str]:
    """List the parameters that will be estimated from proxy answers.

    Diabetic parameters are only counted when has_diabetes is true.
    """
    names = CORE_PARAMETERS + (DIABETES_PARAMETERS if answers.has_diabetes else ())
    return [
        name
        for name in names
        if (parameter := getattr(answers, name)) is not None
        and parameter.input_type == InputMode.PROXY
    ]
