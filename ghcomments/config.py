import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str) -> tuple[str, ...]:
    raw_value = os.getenv(name, "")
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./comments.db")
    base_url: str = os.getenv("BASE_URL", "http://localhost:8000").rstrip("/")
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    allowed_bids: tuple[str, ...] = _env_list("ALLOWED_BIDS")
    allowed_urls: tuple[str, ...] = _env_list("ALLOWED_URLS")
    cors_origins: tuple[str, ...] = _env_list("CORS_ORIGINS")
    github_client_id: str = os.getenv("GITHUB_CLIENT_ID", "")
    github_client_secret: str = os.getenv("GITHUB_CLIENT_SECRET", "")
    github_user_agent: str = os.getenv("GITHUB_USER_AGENT", "ghcomments")
    github_timeout_seconds: float = float(os.getenv("GITHUB_TIMEOUT_SECONDS", "10"))
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "ghcomments_session")
    oauth_state_ttl_seconds: int = int(os.getenv("OAUTH_STATE_TTL_SECONDS", "600"))
    form_token_secret: str = os.getenv("FORM_TOKEN_SECRET", "")
    form_token_algorithm: str = os.getenv("FORM_TOKEN_ALGORITHM", "HS256")
    form_token_ttl_seconds: int = int(os.getenv("FORM_TOKEN_TTL_SECONDS", "3600"))
    max_comment_length: int = int(os.getenv("MAX_COMMENT_LENGTH", "10000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "dev")
    sql_echo: bool = _env_bool("SQL_ECHO", False)


settings = Settings()
