"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from kardia.schemas.base import RiskRegion


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="KARDIA_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Kardia Risk Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Region lookup for countries missing from the mapping table
    fallback_risk_region: RiskRegion = RiskRegion.HIGH

    # Audit
    audit_enabled: bool = True

    @property
    def effective_log_level(self) -> str:
        """Get the log level, forcing DEBUG when debug mode is on."""
        return "DEBUG" if self.debug else self.log_level.upper()


settings = Settings()
