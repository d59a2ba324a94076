from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./pushups.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # HTTP Basic Auth credentials guarding every /api route.
    USERNAME: str = "admin"
    PASSWORD: str = "admin"

    # Target on the very first tracked day.
    START_COUNT: int = 10

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
