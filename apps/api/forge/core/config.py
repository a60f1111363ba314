"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    
    # Environment
    ENV: str = "dev"
    
    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"
    
    # Database
    DATABASE_URL: str
    
    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"
    
    # Internal scheduled endpoints (cron jobs)
    INTERNAL_SECRET: str = ""  # Secret for /internal/scheduled/* and admin endpoints
    
    # AWS SES (alert delivery)
    AWS_SES_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""  # Falls back to the boto3 credential chain if empty
    AWS_SECRET_ACCESS_KEY: str = ""
    SES_CONNECT_TIMEOUT_SECONDS: int = 5
    SES_READ_TIMEOUT_SECONDS: int = 10
    
    # Alert addressing
    FROM_EMAIL: str = "alerts@forge-crm.com"
    ADMIN_EMAIL: str = "admin@forge-crm.com"
    HR_EMAIL: str = "hr@forge-crm.com"
    REVIEWER_EMAIL: str = "sales-manager@forge-crm.com"  # YELLOW copy recipient
    LEADERSHIP_EMAIL: str = "ceo@forge-crm.com"
    DASHBOARD_URL: str = "http://localhost:3000"
    
    # Alert policy
    GRACE_PERIOD_DAYS: int = 14  # Onboarding window after hire date
    DEFAULT_MONTHLY_QUOTA: int = 3000  # Used when a user has no quota row
    
    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    # Rate Limiting (requests per minute)
    RATE_LIMIT_API: int = 60  # General API
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
    
    @property
    def dashboard_base_url(self) -> str:
        return self.DASHBOARD_URL.rstrip("/")


settings = Settings()
