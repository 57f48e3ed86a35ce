from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Worklog Backend"
    # "production" hides internal error details from API responses
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = "sqlite:///./worklog.db"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    FRONTEND_URL: str = "http://localhost:3000"
    BCRYPT_ROUNDS: int = 12

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100 per 15 minutes"

    # Initial passwords for accounts onboarded by a BA without an explicit password
    DEFAULT_CLIENT_PASSWORD: str = "ChangeMe-Client1"
    DEFAULT_DEVELOPER_PASSWORD: str = "ChangeMe-Developer1"

    # Async report generation
    REPORT_GENERATION_DELAY_SECONDS: float = 1.0
    REPORT_WORKERS: int = 2

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
