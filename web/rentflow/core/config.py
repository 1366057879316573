import os
from decimal import Decimal
from typing import List
from functools import lru_cache


class Settings:
    """Application settings read from the environment"""

    # Database
    DB_DSN: str = os.getenv("DB_DSN", "")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_ECHO: bool = os.getenv("DB_ECHO", "false").lower() == "true"

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = []
    CORS_ALLOW_CREDENTIALS: bool = True

    # Rate Limiting
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

    # Business Rules
    FALLBACK_MONTHLY_RENT: Decimal = Decimal(os.getenv("FALLBACK_MONTHLY_RENT", "1000"))
    LEASE_TERM_DAYS: int = int(os.getenv("LEASE_TERM_DAYS", "365"))
    # Deposit is rent times this factor; 1 keeps deposit equal to one month's rent
    LEASE_DEPOSIT_MULTIPLIER: Decimal = Decimal(os.getenv("LEASE_DEPOSIT_MULTIPLIER", "1"))
    REFERRAL_VOUCHER_AMOUNT: Decimal = Decimal(os.getenv("REFERRAL_VOUCHER_AMOUNT", "100"))
    VOUCHER_VALIDITY_DAYS: int = int(os.getenv("VOUCHER_VALIDITY_DAYS", "365"))
    VOUCHER_CODE_PREFIX: str = os.getenv("VOUCHER_CODE_PREFIX", "RENT")

    # Telemetry sink and cache collaborator
    TELEMETRY_URL: str = os.getenv("TELEMETRY_URL", "")
    TELEMETRY_API_KEY: str = os.getenv("TELEMETRY_API_KEY", "")
    TELEMETRY_TIMEOUT: float = float(os.getenv("TELEMETRY_TIMEOUT", "2.0"))
    CACHE_INVALIDATION_URL: str = os.getenv("CACHE_INVALIDATION_URL", "")

    def __init__(self):
        self._validate()
        self._parse_cors_origins()

    def _validate(self):
        """Validate required settings"""
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable must be set")
        if not self.DB_DSN:
            raise ValueError("DB_DSN environment variable must be set")
        if self.LEASE_TERM_DAYS <= 0:
            raise ValueError("LEASE_TERM_DAYS must be positive")
        if self.LEASE_DEPOSIT_MULTIPLIER < 0:
            raise ValueError("LEASE_DEPOSIT_MULTIPLIER must not be negative")
        if self.VOUCHER_VALIDITY_DAYS <= 0:
            raise ValueError("VOUCHER_VALIDITY_DAYS must be positive")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # Security: wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
