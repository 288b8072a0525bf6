"""Builders for risk engine test inputs."""

from typing import Any

from kardia.schemas.base import InputMode
from kardia.schemas.risk import ParameterInput


def manual(value: float) -> ParameterInput:
    """Build a manually entered parameter."""
    return ParameterInput(input_type=InputMode.MANUAL, value=value)


def proxy(**answers: Any) -> ParameterInput:
    """Build a proxy-estimated parameter from question id keyword answers."""
    return ParameterInput(input_type=InputMode.PROXY, proxy_answers=answers)
