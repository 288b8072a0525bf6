"""Pytest configuration and fixtures for risk engine tests."""

from collections.abc import Callable
from typing import Any

import pytest

from factories import manual
from kardia.schemas.base import SmokingStatus
from kardia.schemas.risk import ClinicalProfile, RawAnswerSet
from kardia.services.clinical_risk import reset_clinical_risk_service


@pytest.fixture(autouse=True)
def reset_risk_service() -> None:
    """Give every test a fresh ClinicalRiskService singleton."""
    reset_clinical_risk_service()


@pytest.fixture
def male_profile() -> ClinicalProfile:
    """55-year-old man living in a low-risk region."""
    return ClinicalProfile(age=55, sex="male", country_of_residence="Japan")


@pytest.fixture
def female_profile() -> ClinicalProfile:
    """55-year-old woman living in a very-high-risk region."""
    return ClinicalProfile(age=55, sex="female", country_of_residence="Indonesia")


@pytest.fixture
def build_answers() -> Callable[..., RawAnswerSet]:
    """Factory for answer sets with manual reference values.

    Defaults describe a non-smoker without diabetes with SBP 130,
    total cholesterol 5.0 and HDL 1.2. Diabetic answer sets default to
    diagnosis at 50, HbA1c 53 and creatinine 0.9.
    """

    def _build(**overrides: Any) -> RawAnswerSet:
        data: dict[str, Any] = {
            "has_diabetes": False,
            "smoking_status": SmokingStatus.NOT_CURRENT,
            "sbp": manual(130),
            "tchol": manual(5.0),
            "hdl": manual(1.2),
        }
        if overrides.get("has_diabetes"):
            data.update(
                age_at_diabetes_diagnosis=50,
                hba1c=manual(53),
                scr=manual(0.9),
            )
        data.update(overrides)
        return RawAnswerSet(**data)

    return _build
