"""
Kardia Risk Engine - Command Line Interface

Reads a profile and a flat answer set from a JSON file, runs the risk
engine and prints the result.

Usage:
    kardia-risk --sample               # Use the built-in sample
    kardia-risk --input answers.json   # Assess a JSON file
    kardia-risk --input answers.json --json

Input file shape:
    {
      "profile": {"age": 55, "sex": "male", "country_of_residence": "Japan"},
      "answers": {"has_diabetes": false, "smoking_status": "not currently smoking",
                  "sbp_input_type": "manual", "sbp_value": 130, ...}
    }

The profile may give "date_of_birth" (YYYY-MM-DD) instead of "age".
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kardia import __version__
from kardia.core.audit import AuditAction, log_audit
from kardia.core.config import settings
from kardia.core.exceptions import RiskEngineError
from kardia.schemas.risk import ClinicalProfile, RiskAssessmentRequest, RiskResult
from kardia.services.clinical_risk import get_clinical_risk_service

logger = logging.getLogger(__name__)

# ============================================================================
# Sample Input
# ============================================================================

SAMPLE_INPUT: dict[str, Any] = {
    "profile": {"age": 58, "sex": "female", "country_of_residence": "Indonesia"},
    "answers": {
        "has_diabetes": True,
        "smoking_status": "not currently smoking",
        "age_at_diabetes_diagnosis": 51,
        "sbp_input_type": "manual",
        "sbp_value": 142,
        "tchol_input_type": "proxy",
        "tchol_proxy_answers": {
            "q_fam_chol_heart_attack": "yes",
            "q_cooking_oil": "palm oil or bulk cooking oil",
            "q_fish_intake": "rarely",
        },
        "hdl_input_type": "proxy",
        "hdl_proxy_answers": {"q_exercise_type": "regular but light (walking)"},
        "hba1c_input_type": "proxy",
        "hba1c_proxy_answers": {
            "q_smbg_monitoring": "yes, often above target",
            "q_adherence": "disciplined on medication, lapses on diet",
        },
        "scr_input_type": "manual",
        "scr_value": 0.9,
    },
}

# ============================================================================
# Display Functions
# ============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'
    GRAY = '\033[90m'

def print_header(text: str, char: str = "="):
    """Print a formatted header."""
    width = 60
    print()
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text.center(width)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")

def print_item(label: str, value: str, indent: int = 2):
    """Print a labeled item."""
    spaces = " " * indent
    print(f"{spaces}{Colors.GRAY}{label}:{Colors.END} {value}")

def print_error(text: str):
    """Print error message."""
    print(f"  {Colors.RED}✗{Colors.END} {text}", file=sys.stderr)

def display_result(result: RiskResult):
    """Print a risk result."""
    print_header("10-YEAR CARDIOVASCULAR RISK")
    print_item("Model", result.model_display_name)
    print_item("Region", result.determined_risk_region.value)
    print_item("Risk", f"{Colors.BOLD}{result.calibrated_10_year_risk_percent:.2f}%{Colors.END}")
    print_item("Category", result.risk_category.value)

    print()
    print(f"  {Colors.YELLOW}Clinical inputs{Colors.END}")
    estimated = set(result.estimated_parameters)
    for name, value in result.final_clinical_inputs.model_dump(mode="json", exclude_none=True).items():
        marker = " (estimated)" if name in estimated else ""
        print_item(name, f"{value}{marker}", indent=4)

# ============================================================================
# Input Parsing
# ============================================================================

def parse_profile(data: dict[str, Any]) -> ClinicalProfile:
    """Build a profile from JSON data, accepting age or date_of_birth."""
    if "age" not in data and "date_of_birth" in data:
        return ClinicalProfile.from_date_of_birth(
            date.fromisoformat(data["date_of_birth"]),
            data["sex"],
            data["country_of_residence"],
        )
    return ClinicalProfile.model_validate(data)

def assess(payload: dict[str, Any]) -> RiskResult:
    """Validate a payload and compute its risk."""
    profile = parse_profile(payload["profile"])
    answers = RiskAssessmentRequest.from_flat(payload["answers"])
    return get_clinical_risk_service().compute_risk(answers, profile)

def audit_failure(action: AuditAction, error: Exception):
    """Record a rejected assessment without any input values."""
    if settings.audit_enabled:
        log_audit(
            action=action,
            resource_type="risk_request",
            details={"error_type": type(error).__name__},
            success=False,
        )

# ============================================================================
# Main
# ============================================================================

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kardia-risk",
        description="Kardia Risk Engine - SCORE2 10-year CVD risk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  kardia-risk --sample                 # Assess the built-in sample
  kardia-risk --input answers.json     # Assess a JSON file
  kardia-risk -i answers.json --json   # Print the result as JSON
""",
    )
    parser.add_argument('--input', '-i', help='Path to a JSON file with profile and answers')
    parser.add_argument('--sample', '-s', action='store_true', help='Use the built-in sample')
    parser.add_argument('--json', '-j', action='store_true', help='Print the result as JSON')

    args = parser.parse_args(argv)

    if not args.input and not args.sample:
        parser.print_help()
        return 2

    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info(f"{settings.app_name} {__version__} starting")

    if args.input:
        path = Path(args.input)
        if not path.exists():
            print_error(f"File not found: {args.input}")
            return 1

    try:
        payload = json.loads(path.read_text()) if args.input else SAMPLE_INPUT
        result = assess(payload)
    except RiskEngineError as e:
        audit_failure(AuditAction.ERROR, e)
        print_error(f"Invalid input: {e}")
        return 1
    except (ValidationError, ValueError, TypeError, KeyError) as e:
        # JSONDecodeError and bad ISO dates are ValueErrors
        audit_failure(AuditAction.VALIDATION_FAILURE, e)
        print_error(f"Invalid input: {e}")
        return 1

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        display_result(result)
    return 0

if __name__ == "__main__":
    sys.exit(main())
