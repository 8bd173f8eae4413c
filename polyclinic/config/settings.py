from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALL_SERVICES = ("clients", "clinic", "employees", "registrations", "results")


class Settings(BaseSettings):
    """
    Application settings loaded from the environment (and an optional .env file).

    Breaker thresholds, timeouts and peer base URLs are injected here and never
    hard-coded in the services that use them.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API Configuration
    PROJECT_NAME: str = Field("Polyclinic Services", description="Application title")
    VERSION: str = Field("0.1.0", description="Application version")
    ENVIRONMENT: str = Field("development", description="development, test or production")
    DEBUG: bool = Field(False, description="Expose interactive docs and verbose errors")
    API_PREFIX: str = Field("", description="Prefix mounted in front of every service router")
    ENABLED_SERVICES: list[str] = Field(
        default=list(ALL_SERVICES),
        description="Service routers mounted by this process",
    )

    # Database
    DATABASE_URL: str = Field(
        "postgresql+asyncpg://postgres@localhost:5432/polyclinic",
        description="SQLAlchemy async database URL",
    )
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Security
    JWT_SECRET_KEY: str = Field("change-me", description="Secret used to verify bearer tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Bearer token signature algorithm")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="colored, json or plain")

    # Peer services
    CLIENT_SERVICE_URL: str = Field("http://localhost:8000", description="Base URL of the client service")
    CLINIC_SERVICE_URL: str = Field("http://localhost:8000", description="Base URL of the clinic service")
    EMPLOYEE_SERVICE_URL: str = Field("http://localhost:8000", description="Base URL of the employee service")
    REGISTRATION_SERVICE_URL: str = Field(
        "http://localhost:8000", description="Base URL of the registration service"
    )
    PEER_TIMEOUT_SECONDS: float = Field(5.0, description="Timeout of a single outbound peer call")

    # Circuit breaker
    BREAKER_SLIDING_WINDOW_SIZE: int = Field(10, description="Outcomes kept in the rolling window")
    BREAKER_MINIMUM_CALLS: int = Field(10, description="Outcomes required before rates are evaluated")
    BREAKER_FAILURE_RATE_THRESHOLD: float = Field(50.0, description="Failure rate (%) that opens the breaker")
    BREAKER_SLOW_CALL_RATE_THRESHOLD: float = Field(70.0, description="Slow call rate (%) that opens the breaker")
    BREAKER_SLOW_CALL_DURATION_SECONDS: float = Field(2.0, description="Duration above which a call is slow")
    BREAKER_WAIT_DURATION_OPEN_SECONDS: float = Field(60.0, description="Time spent open before probing")
    BREAKER_PERMITTED_CALLS_HALF_OPEN: int = Field(3, description="Trial calls admitted while half-open")

    @field_validator("ENABLED_SERVICES")
    @classmethod
    def validate_services(cls, value: list[str]) -> list[str]:
        unknown = [name for name in value if name not in ALL_SERVICES]
        if unknown:
            raise ValueError(f"Unknown services: {', '.join(unknown)}")
        return value

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        if value not in ("colored", "json", "plain"):
            raise ValueError("LOG_FORMAT must be colored, json or plain")
        return value

    @model_validator(mode="after")
    def validate_peer_timeout(self) -> "Settings":
        # A hung peer must time out before the breaker window could expire.
        if self.PEER_TIMEOUT_SECONDS >= self.BREAKER_WAIT_DURATION_OPEN_SECONDS:
            raise ValueError("PEER_TIMEOUT_SECONDS must be shorter than BREAKER_WAIT_DURATION_OPEN_SECONDS")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Return a cached settings instance.

    Avoids re-reading the environment on every dependency resolution.
    """
    return Settings()
