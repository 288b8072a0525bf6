"""Base enums for the Kardia risk engine."""

from enum import Enum


class Sex(str, Enum):
    """Biological sex, which selects the coefficient set."""

    MALE = "male"
    FEMALE = "female"


class RiskRegion(str, Enum):
    """SCORE2 calibration regions."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class RiskModel(str, Enum):
    """Risk model variants."""

    SCORE2 = "score2"
    SCORE2_OP = "score2_op"  # Older persons, age >= 70
    SCORE2_DIABETES = "score2_diabetes"

    @property
    def display_name(self) -> str:
        """Published model name."""
        return _MODEL_DISPLAY_NAMES[self]


_MODEL_DISPLAY_NAMES = {
    RiskModel.SCORE2: "SCORE2",
    RiskModel.SCORE2_OP: "SCORE2-OP",
    RiskModel.SCORE2_DIABETES: "SCORE2-Diabetes",
}


class InputMode(str, Enum):
    """How a clinical parameter was supplied."""

    MANUAL = "manual"  # Measured value entered directly
    PROXY = "proxy"  # Estimated from lifestyle answers


class SmokingStatus(str, Enum):
    """Current smoking status."""

    ACTIVE = "active smoker"
    NOT_CURRENT = "not currently smoking"


class RiskCategory(str, Enum):
    """Age-stratified ESC 2021 risk categories."""

    LOW_MODERATE = "low_moderate"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"
