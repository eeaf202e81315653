import json
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load env values for components that read os.environ directly.
_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)


def _coerce_json(value: str):
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = "sqlite:///./catalys.db"
    DB_POOL_SIZE: int = 20
    DB_POOL_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30

    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Public web app; used for redirects and links in invitation emails.
    APP_BASE_URL: str = "http://localhost:3000"
    DASHBOARD_PATH: str = "/dashboard"
    ACCEPT_INVITE_PATH: str = "/accept-invite"

    CLERK_JWT_ISSUER: str
    CLERK_JWKS_URL: str
    CLERK_AUDIENCE: list[str] = ["http://localhost:3000", "backend"]
    CLERK_SECRET_KEY: str | None = None
    CLERK_API_BASE_URL: str = "https://api.clerk.com/v1"
    CLERK_REQUEST_TIMEOUT_SECONDS: float = 15.0

    RESEND_API_KEY: str | None = None
    RESEND_AUTH_EMAIL: str | None = None
    RESEND_API_BASE_URL: str = "https://api.resend.com"
    RESEND_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # When false, accept/decline overwrite a terminal invitation instead of rejecting it.
    CO_FOUNDER_INVITATION_ENFORCE_PENDING: bool = True

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("CLERK_AUDIENCE", mode="before")
    @classmethod
    def split_audience(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [aud.strip() for aud in value.split(",") if aud.strip()]
        return value

    @property
    def app_base_url(self) -> str:
        return self.APP_BASE_URL.rstrip("/")

    @property
    def dashboard_url(self) -> str:
        return f"{self.app_base_url}{self.DASHBOARD_PATH}"

    model_config = SettingsConfigDict(env_file=".env", env_json_loads=_coerce_json, extra="ignore")


settings = Settings()
