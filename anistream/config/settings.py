from typing import Optional
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    # ===========================
    # Application Customization
    # ===========================
    APP_NAME: Optional[str] = "AniStream"
    APP_VERSION: str = "1.0.0"

    # ===========================
    # Server Configuration
    # ===========================
    PORT: Optional[int] = 3000

    # ===========================
    # Provider Configuration
    # ===========================
    ANITAKU_URL: str = "https://anitaku.to"
    ANITAKU_AJAX_URL: str = "https://ajax.gogocdn.net/ajax"
    ANITAKU_DOCUMENTATION_URL: str = "https://docs.consumet.org/#tag/anitaku"
    RECAPTCHATOKEN: Optional[str] = ""

    # ===========================
    # Cache Configuration
    # ===========================
    CACHE_BACKEND: Optional[str] = None
    CACHE_TTL: int = 60 * 60
    CACHE_TTL_LONG_FACTOR: int = 24

    # ===========================
    # Redis Configuration
    # ===========================
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None

    # ===========================
    # Database Configuration
    # ===========================
    DATABASE_VERSION: str = "1.0"
    DATABASE_TYPE: Optional[str] = "sqlite"
    DATABASE_PATH: Optional[str] = "/app/data/anistream.db"
    DATABASE_URL: Optional[str] = ""

    # ===========================
    # HTTP Timeout Configuration
    # ===========================
    HTTP_TIMEOUT: Optional[int] = 15
    HEALTH_CHECK_TIMEOUT: Optional[int] = 5

    # ===========================
    # Proxy Configuration
    # ===========================
    PROXY_URL: Optional[str] = None

    # ===========================
    # Logging Configuration
    # ===========================
    LOG_LEVEL: Optional[str] = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"

    # ===========================
    # Internal Configuration
    # ===========================
    CLEANUP_INTERVAL: int = 60

    # ===========================
    # Field Validators
    # ===========================
    @field_validator("ANITAKU_URL", "ANITAKU_AJAX_URL", "PROXY_URL")
    @classmethod
    def normalize_urls(cls, v):
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("CACHE_BACKEND", "DATABASE_TYPE")
    @classmethod
    def normalize_backend(cls, v):
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @model_validator(mode="after")
    def select_cache_backend(self):
        if self.CACHE_BACKEND is None:
            self.CACHE_BACKEND = "redis" if self.REDIS_HOST else "none"
        if self.CACHE_BACKEND not in ("none", "redis", "database"):
            raise ValueError(f"CACHE_BACKEND must be one of none, redis, database (got {self.CACHE_BACKEND})")
        return self

    # ===========================
    # Computed Properties
    # ===========================
    @property
    def CACHE_TTL_LONG(self) -> int:
        return self.CACHE_TTL * self.CACHE_TTL_LONG_FACTOR

    def get_database_url(self) -> str:
        if self.DATABASE_TYPE == "sqlite":
            return f"sqlite:///{self.DATABASE_PATH}"
        return f"postgresql://{self.DATABASE_URL}"

    def get_redis_url(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}"


# ===========================
# Settings Instance
# ===========================
settings = Settings()
