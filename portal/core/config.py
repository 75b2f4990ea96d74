from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

DEFAULT_SLOT_LABELS = (
    "09:00,09:30,10:00,10:30,11:00,11:30,"
    "14:00,14:30,15:00,15:30,16:00,16:30,17:00"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    db_ssl: bool = True  # only applied to postgresql+asyncpg URLs
    auto_create_tables: bool = False  # create_all on startup instead of Alembic

    # JWT
    secret_key: str
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    algorithm: str = "HS256"
    bcrypt_rounds: int = 12

    # CORS
    cors_origins: str = "http://localhost:3004"

    # Bookable time labels, shared by availability, closure and the booking UI
    slot_labels: str = DEFAULT_SLOT_LABELS

    # Env
    env: str = "development"

    # Email (SMTP). Leave smtp_host empty to disable sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "Cabinet Juridique"
    site_name: str = "Cabinet Juridique"
    contact_email: str = "contact@cabinet-juridique.fr"
    contact_phone: str = ""
    contact_address: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def slot_labels_list(self) -> list[str]:
        return [label.strip() for label in self.slot_labels.split(",") if label.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)


settings = Settings()
