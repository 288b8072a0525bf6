"""Proxy question ids and their categorical answers.

Answers are matched exactly. Any answer outside these vocabularies is
treated like the neutral answer for its question.
"""

from enum import Enum


class ProxyQuestion(str, Enum):
    """Question ids used inside the ``*_proxy_answers`` maps."""

    # Systolic blood pressure
    FAMILY_HYPERTENSION = "q_fam_htn"
    SLEEP_PATTERN = "q_sleep_pattern"
    SALT_DIET = "q_salt_diet"  # Multi-select list
    STRESS_RESPONSE = "q_stress_response"
    BODY_SHAPE = "q_body_shape"
    EXERCISE = "q_exercise"  # Also used by the HbA1c estimator

    # Cholesterol
    FAMILY_CHOLESTEROL_HEART_ATTACK = "q_fam_chol_heart_attack"
    COOKING_OIL = "q_cooking_oil"
    EXERCISE_TYPE = "q_exercise_type"
    XANTHOMA = "q_xanthoma"
    FISH_INTAKE = "q_fish_intake"

    # Serum creatinine
    BODY_TYPE = "q_body_type_for_scr"
    DIABETES_CONTROL = "q_diabetes_control_scr"
    RETINOPATHY_NEUROPATHY = "q_retinopathy_neuropathy"
    NSAID_USE = "q_nsaid_use_scr"
    FOAMY_URINE = "q_foamy_urine_scr"

    # HbA1c
    GLUCOSE_SELF_MONITORING = "q_smbg_monitoring"
    ADHERENCE = "q_adherence"


class YesNo(str, Enum):
    YES = "yes"
    NO = "no"


class SleepPattern(str, Enum):
    SOUND = "sound and regular"
    INSOMNIA = "difficulty sleeping or insomnia"


class SaltDietItem(str, Enum):
    """High-salt foods; each selected item counts once."""

    INSTANT_NOODLES = "instant noodles"
    SALTED_FISH = "salted fish"
    PROCESSED_MEAT = "processed meat"
    SALTY_SNACKS = "salty snacks"
    SOY_SAUCE = "soy sauce or fish sauce"


class StressResponse(str, Enum):
    PALPITATIONS = "palpitations and flushed face"
    CALM = "calm"


class BodyShape(str, Enum):
    SLIM = "slim or ideal"
    ABDOMINAL_OBESITY = "abdominal obesity"


class ExerciseFrequency(str, Enum):
    RARELY = "rarely"
    REGULAR_INTENSE = "regular and intense"


class ExerciseType(str, Enum):
    RESISTANCE_OR_HIIT = "weight training or hiit"
    LIGHT_ROUTINE = "regular but light (walking)"
    ALMOST_NEVER = "almost never"


class CookingOil(str, Enum):
    PALM_OR_BULK = "palm oil or bulk cooking oil"
    VEGETABLE = "olive, canola or other vegetable oil"


class FishIntake(str, Enum):
    FREQUENT = "twice a week or more"
    RARELY = "rarely"


class BodyType(str, Enum):
    VERY_MUSCULAR = "very muscular"
    ATHLETIC = "fairly muscular or athletic"
    LEAN = "lean or little body fat"
    AVERAGE = "average"


class DiabetesControl(str, Enum):
    POOR = "poorly controlled"
    GOOD = "well controlled"


class UsageFrequency(str, Enum):
    OFTEN = "often"
    RARELY = "rarely"


class FoamyUrine(str, Enum):
    FREQUENT = "yes, often"
    NEVER = "never"


class GlucoseSelfMonitoring(str, Enum):
    NEVER = "never"
    ON_TARGET = "yes, usually on target"
    ABOVE_TARGET = "yes, often above target"


class Adherence(str, Enum):
    DISCIPLINED = "disciplined on both"
    DIET_LAPSES = "disciplined on medication, lapses on diet"
    MEDICATION_LAPSES = "misses medication, disciplined on diet"
    UNDISCIPLINED = "undisciplined on both"
