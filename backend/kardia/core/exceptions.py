"""Exceptions raised by the risk engine."""


class RiskEngineError(Exception):
    """Base class for risk engine errors."""


class MissingClinicalInputError(RiskEngineError, ValueError):
    """A parameter declared manual or proxy lacks its value or answers."""

    def __init__(self, parameter: str, reason: str) -> None:
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"{parameter}: {reason}")


class DiagnosisAgeError(RiskEngineError, ValueError):
    """Age at diabetes diagnosis is later than the current age."""

    def __init__(self, age_at_diagnosis: int, current_age: int) -> None:
        self.age_at_diagnosis = age_at_diagnosis
        self.current_age = current_age
        super().__init__(
            f"age_at_diabetes_diagnosis ({age_at_diagnosis}) exceeds current age ({current_age})"
        )
