from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union
from pathlib import Path
from dotenv import load_dotenv

# The root of the project directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file_encoding="utf-8", env_ignore_empty=True, extra="ignore")

    APP_NAME: str = "quizgate"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    ALLOWED_ORIGINS: Union[str, List[str]] = ["*"]

    # private GitHub repository holding questions.json and the admin hash
    VAULT_TOKEN: str | None = None
    VAULT_REPO: str | None = None
    VAULT_API_URL: str = "https://api.github.com"
    VAULT_QUESTIONS_PATH: str = "questions.json"
    VAULT_ADMIN_HASH_PATH: str = "admin_hash.txt"

    KV_DATABASE_URL: str | None = None

    EMAIL_API_KEY: str | None = None
    EMAIL_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "NUC7 <noreply@example.com>"
    QUIZ_URL: str = "https://example.com/quiz"

    TOKEN_SECRET: str | None = None

    QUIZ_SIZE: int = 10
    PASS_THRESHOLD: int = 7
    LEDGER_CAPACITY: int = 50

    REQUEST_TIMEOUT_SECONDS: int = 15

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_origins(cls, v):
        if v is None:
            return ["*"]
        if isinstance(v, str):
            vs = v.strip()
            if not vs:
                return ["*"]
            if vs.startswith("["):
                return vs
            return [s.strip() for s in vs.split(",") if s.strip()]
        return v

    @field_validator("QUIZ_SIZE", "PASS_THRESHOLD", "LEDGER_CAPACITY")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v


def load_settings() -> Settings:
    """Read .env (if any) and the process environment once, at startup."""
    load_dotenv(dotenv_path=PROJECT_ROOT / ".env")
    return Settings()
