from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://fitlife_user:fitlife_password@db:5432/fitlife_db"
    SQL_ECHO: bool = False
    # Drop and recreate every table on startup; development only
    RESET_DATABASE: bool = False

    SECRET_KEY: str = "SECRET_KEY_FOR_FITLIFE"
    REFRESH_SECRET_KEY: Optional[str] = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    PASSWORD_MIN_LENGTH: int = 6

    CLIENT_URL: str = "http://localhost:3000"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    PAYMENT_PROVIDER: str = "razorpay"
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    STRIPE_CURRENCY: str = "usd"
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_WEBHOOK_SECRET: Optional[str] = None
    RAZORPAY_CURRENCY: str = "INR"
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"

    WORKOUT_POINTS: int = 10
    DEFAULT_PAGE_SIZE: int = 20

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def refresh_secret(self) -> str:
        return self.REFRESH_SECRET_KEY or self.SECRET_KEY + "_refresh"


settings = Settings()
