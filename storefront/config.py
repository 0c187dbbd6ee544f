import json
from typing import Annotated, List, Optional
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # Full URL wins; otherwise built from the Supabase Postgres parts
    DATABASE_URL: Optional[str] = None
    postgres_user: Optional[str] = None
    postgres_password: Optional[str] = None
    postgres_db: Optional[str] = None
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    PAYMENT_WINDOW_MINUTES: int = 5

    BREVO_API_KEY: Optional[str] = None
    MAIL_FROM: str = "orders@sweetsbybella.com"
    STORE_NAME: str = "Sweets by Bella"
    CONTACT_EMAIL: str = "flawlesscreations@gmail.com"
    # "a@x.com,b@x.com" or a JSON list
    ADMIN_EMAILS: Annotated[List[str], NoDecode] = []

    ZELLE_HANDLE: str = "flawlesscreations@gmail.com"
    CASHAPP_HANDLE: str = "$Actuallybellaa"

    FRONTEND_URL: Optional[str] = None
    CRON_SECRET: Optional[str] = None
    ADMIN_API_KEY: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("ADMIN_EMAILS", mode="before")
    @classmethod
    def split_admin_emails(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [email.strip() for email in value.split(",") if email.strip()]
        return value

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.postgres_user and self.postgres_db:
            encoded_password = quote_plus(self.postgres_password or "")
            return (
                f"postgresql+psycopg2://{self.postgres_user}:"
                f"{encoded_password}@{self.postgres_host}:"
                f"{self.postgres_port}/{self.postgres_db}"
            )

        return "sqlite:///./storefront.db"


settings = Settings()
