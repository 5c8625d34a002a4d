"""
Configuration management for the attendance audit backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Required settings
    DATABASE_URL: str = Field(..., description="Database URL (PostgreSQL in prod, SQLite locally)")
    JWT_SECRET_KEY: str = Field(..., description="JWT secret key for token signing")
    
    # Optional settings with defaults
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRE_MINUTES: int = Field(default=120, description="JWT token expiration in minutes")
    
    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")
    
    # Occurrence dates ("today", the editable window) are calendar dates in this timezone
    ORG_TIMEZONE: str = Field(default="Asia/Kolkata", description="IANA timezone for occurrence dates")
    
    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Adjustment policy defaults (an organization's policy row overrides these)
    DEFAULT_ADJUSTMENT_WINDOW_DAYS: int = Field(
        default=30,
        ge=0,
        description="How many days back an occurrence date may still be adjusted when the org has no policy",
    )
    MAX_LATE_MINUTES: int = Field(
        default=180,
        ge=1,
        le=180,
        description="Upper bound for late minutes on a LATE adjustment; org policies can only lower it",
    )
    AUDIT_RECENT_DAYS: int = Field(default=7, ge=1, description="Window used by the 'recent' audit filter")
    
    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")
    
    # Initial platform owner bootstrap settings
    INITIAL_ADMIN_EMAIL: str = Field(
        default="owner@platform.local",
        description="Email for the initial platform owner (used when no owner exists)"
    )
    INITIAL_ADMIN_PASSWORD: str = Field(
        default="Owner@12345",
        description="Password for the initial platform owner (used when no owner exists)"
    )
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
    
    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v
    
    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()
    
    @field_validator("ORG_TIMEZONE")
    @classmethod
    def validate_org_timezone(cls, v: str) -> str:
        """Validate ORG_TIMEZONE is a known IANA zone"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"ORG_TIMEZONE must be an IANA timezone name, got {v!r}")
        return v
    
    def validate_production(self) -> None:
        """
        Validate settings for production environment
        
        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if len(self.JWT_SECRET_KEY) < 32:
                raise ValueError(
                    "JWT_SECRET_KEY must be at least 32 characters in production environment"
                )
            
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )
    
    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins
        
        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
