"""Country to SCORE2 risk region mapping.

Country names are stored lower-case; lookups are case and whitespace
insensitive. Countries missing from the table fall back to the high-risk
region rather than raising.
"""

import logging

from kardia.schemas.base import RiskRegion

logger = logging.getLogger(__name__)


# ============================================================================
# Region Table
# ============================================================================

# Scan order is low -> very_high; lists are disjoint.
REGION_COUNTRIES: dict[RiskRegion, frozenset[str]] = {
    RiskRegion.LOW: frozenset({
        "japan",
        "singapore",
        "south korea",
    }),
    RiskRegion.MODERATE: frozenset({
        "sri lanka",
        "thailand",
    }),
    RiskRegion.HIGH: frozenset({
        "bahrain",
        "bangladesh",
        "bhutan",
        "brunei",
        "cambodia",
        "china",
        "india",
        "iran",
        "jordan",
        "kuwait",
        "malaysia",
        "nepal",
        "qatar",
        "taiwan",
        "united arab emirates",
        "vietnam",
    }),
    RiskRegion.VERY_HIGH: frozenset({
        "afghanistan",
        "east timor",
        "indonesia",
        "iraq",
        "kyrgyzstan",
        "laos",
        "mongolia",
        "myanmar",
        "north korea",
        "oman",
        "pakistan",
        "philippines",
        "saudi arabia",
        "tajikistan",
        "turkmenistan",
        "uzbekistan",
        "yemen",
    }),
}

DEFAULT_RISK_REGION = RiskRegion.HIGH


def normalize_country(country_name: str) -> str:
    """Normalize a country name for lookup."""
    return country_name.strip().lower()


def resolve_region(
    country_name: str,
    default: RiskRegion = DEFAULT_RISK_REGION,
) -> RiskRegion:
    """Resolve the calibration region for a country of residence.

    Args:
        country_name: Country name in any case, surrounding whitespace allowed.
        default: Region returned when the country is not in the table.

    Returns:
        The RiskRegion whose country list contains the country, else default.
    """
    country = normalize_country(country_name)

    for region, countries in REGION_COUNTRIES.items():
        if country in countries:
            return region

    logger.debug(f"Country '{country}' not mapped, using region {default.value}")
    return default
