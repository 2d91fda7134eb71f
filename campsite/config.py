from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator
from dataclasses import dataclass
from functools import lru_cache
from typing import List


@dataclass(frozen=True)
class ReservationPolicy:
    """Booking rules for the campsite, in nights and days."""
    min_length: int = 1
    max_length: int = 3
    min_start_offset_days: int = 1
    max_start_offset_days: int = 30


class Settings(BaseSettings):
    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")
    
    # Database - PostgreSQL for production, SQLite for development
    database_url: str = Field(
        default="sqlite:///./campsite.db",
        alias="DATABASE_URL"
    )
    
    # ==============================================
    # Reservation policy
    # ==============================================
    # Length of stay in nights
    reservation_min_length: int = Field(default=1, alias="RESERVATION_MIN_LENGTH")
    reservation_max_length: int = Field(default=3, alias="RESERVATION_MAX_LENGTH")
    
    # Lead time window, in days counted from today
    reservation_min_start_offset_days: int = Field(default=1, alias="RESERVATION_MIN_START_OFFSET_DAYS")
    reservation_max_start_offset_days: int = Field(default=30, alias="RESERVATION_MAX_START_OFFSET_DAYS")
    
    # Zone used to decide what "today" is
    timezone: str = Field(default="UTC", alias="CAMPSITE_TIMEZONE")
    
    # ==============================================
    # Concurrency
    # ==============================================
    # Seconds a writer waits on the locked calendar before giving up
    lock_timeout_seconds: float = Field(default=5.0, alias="LOCK_TIMEOUT_SECONDS")
    
    # Re-runs of a write transaction after a transient failure
    transaction_retries: int = Field(default=2, alias="TRANSACTION_RETRIES")
    
    # CORS - Frontend URLs from environment (comma-separated)
    allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS"
    )
    
    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    
    @field_validator('database_url')
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Hosting providers hand out postgres:// but SQLAlchemy needs postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v
    
    @field_validator('reservation_min_length', 'reservation_max_length')
    @classmethod
    def validate_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Reservation length bounds must be at least 1 night")
        return v
    
    @field_validator('reservation_min_start_offset_days', 'reservation_max_start_offset_days')
    @classmethod
    def validate_offset(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Reservation start offsets cannot be negative")
        return v
    
    @field_validator('transaction_retries')
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("TRANSACTION_RETRIES cannot be negative")
        return v
    
    @model_validator(mode='after')
    def validate_policy_bounds(self):
        """min must not exceed max for both policy pairs"""
        if self.reservation_min_length > self.reservation_max_length:
            raise ValueError("RESERVATION_MIN_LENGTH must not exceed RESERVATION_MAX_LENGTH")
        if self.reservation_min_start_offset_days > self.reservation_max_start_offset_days:
            raise ValueError(
                "RESERVATION_MIN_START_OFFSET_DAYS must not exceed RESERVATION_MAX_START_OFFSET_DAYS"
            )
        return self
    
    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"
    
    @property
    def reservation_policy(self) -> ReservationPolicy:
        return ReservationPolicy(
            min_length=self.reservation_min_length,
            max_length=self.reservation_max_length,
            min_start_offset_days=self.reservation_min_start_offset_days,
            max_start_offset_days=self.reservation_max_start_offset_days,
        )
    
    @property
    def cors_origins(self) -> List[str]:
        """
        Parse allowed origins from comma-separated string.
        Returns a list suitable for CORSMiddleware.
        """
        origins = []
        for origin in self.allowed_origins.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins
    
    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Initialize settings on module load
settings = get_settings()
