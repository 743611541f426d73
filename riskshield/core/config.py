
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "RiskShield Compliance API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./riskshield_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default
    default_client_id: str = Field(default="default", alias="DEFAULT_CLIENT_ID")

    # Verification rules
    expiry_warning_days: int = Field(
        default=30, alias="EXPIRY_WARNING_DAYS",
    )  # Policies expiring within this window are flagged for review
    review_confidence_threshold: float | None = Field(
        default=None, alias="REVIEW_CONFIDENCE_THRESHOLD",
    )  # Flag for review when extraction confidence is below this (unset = off)

    # Communications
    deficiency_due_days: int = Field(default=14, alias="DEFICIENCY_DUE_DAYS")
    compliance_team_signature: str = Field(
        default="RiskShield AI Compliance Team", alias="COMPLIANCE_TEAM_SIGNATURE",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def portal_upload_url(self) -> str:
        return f"{self.frontend_url.rstrip('/')}/portal/upload"

settings = Settings()
