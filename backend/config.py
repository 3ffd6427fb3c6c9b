from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # development | test | staging | production
    APP_NAME: str = "Plan Check"
    DATABASE_URL: str = "sqlite:///data/plans.db"
    DATA_DIR: Path = Path("data")
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:8050",
        "http://127.0.0.1:3000",
    ]
    # Single hardcoded account; there is no login flow.
    DEFAULT_USER_ID: str = "testuser"
    LOG_LEVEL: str = "INFO"
    SECURITY_HEADERS_ENABLED: bool = True
    SECURITY_CSP: str = (
        "default-src 'self'; "
        "img-src 'self' data:; "
        "style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; "
        "frame-ancestors 'none'; "
        "base-uri 'self';"
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod", "staging"}

    def validate_configuration(self) -> None:
        if not self.is_production_like:
            return

        errors: list[str] = []
        if "*" in self.CORS_ORIGINS:
            errors.append("CORS_ORIGINS must not contain '*'")
        if (self.DEFAULT_USER_ID or "").strip() in {"", "testuser"}:
            errors.append("DEFAULT_USER_ID must be set to a real account id")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Invalid production configuration: {joined}")


settings = Settings()
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
