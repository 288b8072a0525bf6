"""Tests for clinical value resolution and the proxy estimators."""

import pytest

from factories import manual, proxy
from kardia.core.exceptions import MissingClinicalInputError
from kardia.core.rounding import round_half_up
from kardia.schemas.base import InputMode, Sex, SmokingStatus
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
    SaltDietItem,
    SleepPattern,
    StressResponse,
    UsageFrequency,
    YesNo,
)
from kardia.schemas.risk import ClinicalProfile, ParameterInput
from kardia.services.value_resolver import (
    estimate_hba1c,
    estimate_hdl,
    estimate_sbp,
    estimate_serum_creatinine,
    estimate_total_cholesterol,
    estimated_parameters,
    resolve_clinical_values,
)


# ============================================================================
# Rounding Tests
# ============================================================================


class TestRounding:
    """Test half-away-from-zero rounding."""

    def test_half_rounds_up(self):
        """Test .5 rounds away from zero, unlike round()."""
        assert round_half_up(114.5) == 115
        assert round_half_up(128.5) == 129

    def test_two_decimals(self):
        """Test rounding to two decimals uses the decimal repr."""
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(9.500000000000002, 2) == 9.5

    def test_negative(self):
        """Test negative halves round away from zero."""
        assert round_half_up(-0.125, 2) == -0.13


# ============================================================================
# SBP Estimator Tests
# ============================================================================


class TestEstimateSbp:
    """Test systolic blood pressure estimator."""

    def test_baseline_female(self):
        """Test baseline at age 25 for a woman is 110."""
        profile = ClinicalProfile(age=25, sex=Sex.FEMALE, country_of_residence="japan")
        assert estimate_sbp({}, profile, is_smoker=False) == 110

    def test_baseline_male_rounds_half_up(self):
        """Test male age 55 baseline 128.5 rounds to 129."""
        profile = ClinicalProfile(age=55, sex=Sex.MALE, country_of_residence="japan")
        assert estimate_sbp({}, profile, is_smoker=False) == 129

    def test_all_risk_answers(self):
        """Test every raising answer adds its fixed delta."""
        profile = ClinicalProfile(age=55, sex=Sex.MALE, country_of_residence="japan")
        answers = {
            "q_fam_htn": YesNo.YES,
            "q_sleep_pattern": SleepPattern.INSOMNIA,
            "q_salt_diet": [SaltDietItem.INSTANT_NOODLES, SaltDietItem.SALTED_FISH],
            "q_stress_response": StressResponse.PALPITATIONS,
            "q_body_shape": BodyShape.ABDOMINAL_OBESITY,
        }

        # 128.5 + 7 + 7 + 10 + 10 + 5 + 12
        assert estimate_sbp(answers, profile, is_smoker=True) == 180

    def test_intense_exercise_lowers(self):
        """Test regular intense exercise subtracts 7."""
        profile = ClinicalProfile(age=25, sex=Sex.FEMALE, country_of_residence="japan")
        answers = {"q_exercise": ExerciseFrequency.REGULAR_INTENSE}
        assert estimate_sbp(answers, profile, is_smoker=False) == 103

    def test_each_salt_item_adds_five(self):
        """Test salt items are counted individually."""
        profile = ClinicalProfile(age=25, sex=Sex.FEMALE, country_of_residence="japan")
        one = estimate_sbp({"q_salt_diet": ["soy sauce or fish sauce"]}, profile, False)
        three = estimate_sbp(
            {"q_salt_diet": ["instant noodles", "salted fish", "salty snacks"]}, profile, False
        )
        assert one == 115
        assert three == 125

    def test_neutral_answers_add_nothing(self):
        """Test neutral answers equal the empty baseline."""
        profile = ClinicalProfile(age=40, sex=Sex.FEMALE, country_of_residence="japan")
        answers = {
            "q_fam_htn": "no",
            "q_sleep_pattern": "sound and regular",
            "q_stress_response": "calm",
            "q_body_shape": "slim or ideal",
            "q_exercise": "rarely",
        }
        assert estimate_sbp(answers, profile, False) == estimate_sbp({}, profile, False)

    def test_deterministic(self):
        """Test same answers give the same estimate."""
        profile = ClinicalProfile(age=47, sex=Sex.MALE, country_of_residence="japan")
        answers = {"q_fam_htn": "yes", "q_salt_diet": ["salty snacks"]}
        results = {estimate_sbp(answers, profile, True) for _ in range(20)}
        assert len(results) == 1


# ============================================================================
# Total Cholesterol Estimator Tests
# ============================================================================


class TestEstimateTotalCholesterol:
    """Test total cholesterol estimator."""

    def test_baseline(self):
        """Test baseline is 4.0 mmol/L."""
        assert estimate_total_cholesterol({}, is_smoker=False) == 4.0

    def test_all_answers(self):
        """Test all deltas combined."""
        answers = {
            "q_fam_chol_heart_attack": YesNo.YES,
            "q_cooking_oil": CookingOil.PALM_OR_BULK,
            "q_exercise_type": ExerciseType.ALMOST_NEVER,
            "q_xanthoma": YesNo.YES,
            "q_fish_intake": FishIntake.FREQUENT,
        }
        # 4.0 + 0.7 + 1.2 + 0.5 + 3.0 + 0.4 - 0.3
        assert estimate_total_cholesterol(answers, is_smoker=True) == pytest.approx(9.5)

    def test_xanthoma(self):
        """Test xanthoma adds 3.0."""
        assert estimate_total_cholesterol({"q_xanthoma": "yes"}, False) == pytest.approx(7.0)

    def test_smoking(self):
        """Test smoking adds 0.4."""
        assert estimate_total_cholesterol({}, is_smoker=True) == pytest.approx(4.4)

    def test_fish_intake_lowers(self):
        """Test frequent fish lowers by 0.3."""
        assert estimate_total_cholesterol(
            {"q_fish_intake": "twice a week or more"}, False
        ) == pytest.approx(3.7)

    def test_other_exercise_types_neutral(self):
        """Test only almost-never exercise raises cholesterol."""
        for exercise in (ExerciseType.RESISTANCE_OR_HIIT, ExerciseType.LIGHT_ROUTINE):
            assert estimate_total_cholesterol({"q_exercise_type": exercise}, False) == 4.0


# ============================================================================
# HDL Estimator Tests
# ============================================================================


class TestEstimateHdl:
    """Test HDL cholesterol estimator."""

    def test_unanswered_exercise_lowers(self):
        """Test missing exercise answer counts as almost never."""
        assert estimate_hdl({}, Sex.FEMALE, is_smoker=False) == pytest.approx(1.1)
        assert estimate_hdl({}, Sex.MALE, is_smoker=False) == pytest.approx(0.9)

    def test_resistance_training(self):
        """Test resistance/HIIT adds 0.3."""
        answers = {"q_exercise_type": ExerciseType.RESISTANCE_OR_HIIT}
        assert estimate_hdl(answers, Sex.FEMALE, False) == pytest.approx(1.6)

    def test_light_routine(self):
        """Test light routine adds 0.1."""
        answers = {"q_exercise_type": ExerciseType.LIGHT_ROUTINE}
        assert estimate_hdl(answers, Sex.FEMALE, False) == pytest.approx(1.4)

    def test_smoker_with_fish(self):
        """Test smoking and fish intake combine."""
        answers = {
            "q_exercise_type": ExerciseType.RESISTANCE_OR_HIIT,
            "q_fish_intake": FishIntake.FREQUENT,
        }
        # 1.1 + 0.3 - 0.25 + 0.15
        assert estimate_hdl(answers, Sex.MALE, is_smoker=True) == pytest.approx(1.3)


# ============================================================================
# Serum Creatinine Estimator Tests
# ============================================================================


class TestEstimateSerumCreatinine:
    """Test serum creatinine estimator."""

    def test_baselines(self):
        """Test sex baselines with average body type."""
        assert estimate_serum_creatinine({}, Sex.FEMALE, False) == pytest.approx(0.7)
        assert estimate_serum_creatinine({}, Sex.MALE, False) == pytest.approx(0.9)

    def test_body_type_factors(self):
        """Test body type scales the baseline."""
        cases = {
            BodyType.VERY_MUSCULAR: 1.08,
            BodyType.ATHLETIC: 0.99,
            BodyType.LEAN: 0.81,
            BodyType.AVERAGE: 0.9,
        }
        for body_type, expected in cases.items():
            answers = {"q_body_type_for_scr": body_type}
            assert estimate_serum_creatinine(answers, Sex.MALE, False) == pytest.approx(expected)

    def test_body_type_plain_strings(self):
        """Test body type answers given as plain strings, as parsed from JSON."""
        assert estimate_serum_creatinine({"q_body_type_for_scr": "very muscular"}, Sex.MALE, False) == 1.08
        assert estimate_serum_creatinine({"q_body_type_for_scr": "unknown"}, Sex.MALE, False) == 0.9

    def test_damage_and_stressor_points(self):
        """Test all additive points on a very muscular man."""
        answers = {
            "q_body_type_for_scr": BodyType.VERY_MUSCULAR,
            "q_diabetes_control_scr": DiabetesControl.POOR,
            "q_retinopathy_neuropathy": YesNo.YES,
            "q_nsaid_use_scr": UsageFrequency.OFTEN,
            "q_foamy_urine_scr": FoamyUrine.FREQUENT,
        }
        # 1.08 + 0.4 + 0.3 + 0.1 + 0.15 + 0.25
        assert estimate_serum_creatinine(answers, Sex.MALE, is_smoker=True) == pytest.approx(2.28)

    def test_lean_female_floor_is_scaled_baseline(self):
        """Test the lower clamp is the body-type-scaled baseline."""
        answers = {"q_body_type_for_scr": BodyType.LEAN}
        assert estimate_serum_creatinine(answers, Sex.FEMALE, False) == pytest.approx(0.63)

    def test_within_bounds(self):
        """Test estimate never exceeds 4.0 mg/dL."""
        answers = {
            "q_body_type_for_scr": "very muscular",
            "q_diabetes_control_scr": "poorly controlled",
            "q_retinopathy_neuropathy": "yes",
            "q_nsaid_use_scr": "often",
            "q_foamy_urine_scr": "yes, often",
        }
        assert estimate_serum_creatinine(answers, Sex.MALE, True) <= 4.0


# ============================================================================
# HbA1c Estimator Tests
# ============================================================================


class TestEstimateHba1c:
    """Test HbA1c estimator."""

    def test_unanswered_defaults(self):
        """Test no monitoring and poor adherence by default."""
        assert estimate_hba1c({}) == 90

    def test_on_target_disciplined(self):
        """Test best-controlled answers."""
        answers = {
            "q_smbg_monitoring": GlucoseSelfMonitoring.ON_TARGET,
            "q_adherence": Adherence.DISCIPLINED,
        }
        assert estimate_hba1c(answers) == 53

    def test_adherence_penalties(self):
        """Test each adherence answer adds its penalty to the baseline."""
        cases = {
            Adherence.DISCIPLINED: 65,
            Adherence.DIET_LAPSES: 75,
            Adherence.MEDICATION_LAPSES: 80,
            Adherence.UNDISCIPLINED: 90,
        }
        for adherence, expected in cases.items():
            answers = {"q_smbg_monitoring": GlucoseSelfMonitoring.NEVER, "q_adherence": adherence}
            assert estimate_hba1c(answers) == expected

    def test_above_target(self):
        """Test self-monitoring above target starts at 75."""
        answers = {
            "q_smbg_monitoring": GlucoseSelfMonitoring.ABOVE_TARGET,
            "q_adherence": Adherence.UNDISCIPLINED,
        }
        assert estimate_hba1c(answers) == 100

    def test_exercise_lowers(self):
        """Test rigorous exercise subtracts 7."""
        answers = {
            "q_smbg_monitoring": GlucoseSelfMonitoring.ON_TARGET,
            "q_adherence": Adherence.DISCIPLINED,
            "q_exercise": ExerciseFrequency.REGULAR_INTENSE,
        }
        assert estimate_hba1c(answers) == 46

    def test_returns_int(self):
        """Test HbA1c estimate is an integer."""
        assert isinstance(estimate_hba1c({}), int)

    def test_plain_string_answers(self):
        """Test answers given as plain strings, as parsed from JSON."""
        answers = {
            "q_smbg_monitoring": "yes, often above target",
            "q_adherence": "disciplined on medication, lapses on diet",
        }
        assert estimate_hba1c(answers) == 85

    def test_unknown_answers_fall_back(self):
        """Test unrecognized answers use the no-monitoring baseline and no penalty."""
        assert estimate_hba1c({"q_smbg_monitoring": "sometimes", "q_adherence": "mostly"}) == 65


# ============================================================================
# Resolution Tests
# ============================================================================


class TestResolveClinicalValues:
    """Test resolution of a whole answer set."""

    def test_manual_values(self, build_answers, male_profile):
        """Test manual values are used as-is."""
        values = resolve_clinical_values(build_answers(), male_profile)

        assert values.age == 55
        assert values.sex == Sex.MALE
        assert values.is_smoker is False
        assert values.has_diabetes is False
        assert values.sbp == 130.0
        assert values.tchol == 5.0
        assert values.hdl == 1.2

    def test_non_diabetic_has_no_diabetic_fields(self, build_answers, male_profile):
        """Test diabetes-only fields are absent without diabetes."""
        values = resolve_clinical_values(
            build_answers(hba1c=manual(60), scr=manual(1.0), age_at_diabetes_diagnosis=40),
            male_profile,
        )
        assert values.hba1c is None
        assert values.scr is None
        assert values.age_at_diabetes_diagnosis is None

    def test_diabetic_fields(self, build_answers, male_profile):
        """Test diabetic fields are resolved."""
        values = resolve_clinical_values(build_answers(has_diabetes=True), male_profile)
        assert values.age_at_diabetes_diagnosis == 50
        assert values.hba1c == 53.0
        assert values.scr == 0.9

    def test_proxy_values(self, build_answers, male_profile):
        """Test proxy mode runs the estimators."""
        answers = build_answers(
            smoking_status=SmokingStatus.ACTIVE,
            sbp=proxy(),
            tchol=proxy(),
            hdl=proxy(),
        )
        values = resolve_clinical_values(answers, male_profile)

        assert values.is_smoker is True
        assert values.sbp == 134.0  # 128.5 + 5 smoking, rounded
        assert values.tchol == pytest.approx(4.4)
        assert values.hdl == pytest.approx(0.65)

    def test_diabetic_proxy_values(self, build_answers, female_profile):
        """Test HbA1c and creatinine proxies."""
        answers = build_answers(has_diabetes=True, hba1c=proxy(), scr=proxy())
        values = resolve_clinical_values(answers, female_profile)

        assert values.hba1c == 90
        assert values.scr == pytest.approx(0.7)

    def test_exercise_read_from_hba1c_answers(self, build_answers, female_profile):
        """Test intense exercise lowers HbA1c only when sent with the HbA1c answers."""
        intense = {"q_exercise": "regular and intense"}
        in_sbp_map = build_answers(
            has_diabetes=True, sbp=proxy(**intense), hba1c=proxy(), scr=manual(0.9)
        )
        in_hba1c_map = build_answers(has_diabetes=True, hba1c=proxy(**intense), scr=manual(0.9))

        assert resolve_clinical_values(in_sbp_map, female_profile).hba1c == 90
        assert resolve_clinical_values(in_hba1c_map, female_profile).hba1c == 83

    def test_manual_bypasses_proxy(self, build_answers, male_profile):
        """Test proxy answers are ignored in manual mode."""
        quiet = ParameterInput(input_type=InputMode.MANUAL, value=140, proxy_answers={})
        loud = ParameterInput(
            input_type=InputMode.MANUAL,
            value=140,
            proxy_answers={"q_fam_htn": "yes", "q_body_shape": "abdominal obesity"},
        )

        a = resolve_clinical_values(build_answers(sbp=quiet), male_profile)
        b = resolve_clinical_values(build_answers(sbp=loud), male_profile)

        assert a.sbp == b.sbp == 140.0

    def test_manual_without_value_raises(self, build_answers, male_profile):
        """Test manual mode without value fails loudly."""
        answers = build_answers(tchol=ParameterInput(input_type=InputMode.MANUAL))
        with pytest.raises(MissingClinicalInputError) as exc_info:
            resolve_clinical_values(answers, male_profile)
        assert exc_info.value.parameter == "tchol"

    def test_proxy_without_answers_raises(self, build_answers, male_profile):
        """Test proxy mode without answers fails loudly."""
        answers = build_answers(hdl=ParameterInput(input_type=InputMode.PROXY))
        with pytest.raises(MissingClinicalInputError):
            resolve_clinical_values(answers, male_profile)

    def test_missing_parameter_raises(self, build_answers, male_profile):
        """Test a missing parameter fails loudly."""
        with pytest.raises(MissingClinicalInputError):
            resolve_clinical_values(build_answers(sbp=None), male_profile)

    def test_diabetic_without_diagnosis_age_raises(self, build_answers, male_profile):
        """Test diabetic answers need an age at diagnosis."""
        answers = build_answers(has_diabetes=True, age_at_diabetes_diagnosis=None)
        with pytest.raises(MissingClinicalInputError):
            resolve_clinical_values(answers, male_profile)

    def test_diabetic_without_creatinine_raises(self, build_answers, male_profile):
        """Test diabetic answers need creatinine."""
        answers = build_answers(has_diabetes=True, scr=None)
        with pytest.raises(MissingClinicalInputError):
            resolve_clinical_values(answers, male_profile)


class TestEstimatedParameters:
    """Test listing of proxy-estimated parameters."""

    def test_none_estimated(self, build_answers):
        """Test all-manual answers."""
        assert estimated_parameters(build_answers()) == []

    def test_some_estimated(self, build_answers):
        """Test proxy parameters are listed in order."""
        answers = build_answers(sbp=proxy(), hdl=proxy())
        assert estimated_parameters(answers) == ["sbp", "hdl"]

    def test_diabetic_parameters_only_with_diabetes(self, build_answers):
        """Test diabetic proxies are ignored without diabetes."""
        answers = build_answers(hba1c=proxy(), scr=proxy())
        assert estimated_parameters(answers) == []

        diabetic = build_answers(has_diabetes=True, hba1c=proxy(), scr=proxy())
        assert estimated_parameters(diabetic) == ["hba1c", "scr"]
