# app/core/config.py

from typing import List, Literal, Optional, Tuple

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from app.core.errors import ConfigurationError

DEFAULT_PORT = "8080"
DEVELOPMENT = "Development"


class Settings(BaseSettings):
    """Runtime configuration, built once at startup and passed around."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    # --- Banco de dados ---
    database_url: Optional[str] = None          # override (Railway injeta DATABASE_URL)
    default_connection: Optional[str] = None    # entrada nomeada, normalmente no .env
    database_password: Optional[str] = None     # valor mascarado nos logs e respostas

    db_max_retry_count: int = 3
    db_max_retry_delay: float = 10.0
    db_command_timeout: int = 60
    db_connect_timeout: int = 15
    sql_echo: bool = False

    # --- Startup ---
    prewarm_mode: Literal["detached", "inline", "off"] = "detached"
    prewarm_delay: float = 2.0
    probe_connection_strings: List[str] = []

    # --- Servidor ---
    port: Optional[str] = None
    app_env: str = "Production"
    railway_static_url: Optional[str] = None
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.app_env == DEVELOPMENT


def load_settings() -> Settings:
    load_dotenv()  # Carrega as variáveis do .env
    return Settings()


def resolve_connection_string(settings: Settings) -> str:
    """DATABASE_URL wins over the named entry; neither present is fatal."""
    if settings.database_url:
        return normalize_connection_string(settings.database_url)
    if settings.default_connection:
        return normalize_connection_string(settings.default_connection)
    raise ConfigurationError("Connection string not found")


def connection_string_source(settings: Settings) -> str:
    return "DATABASE_URL" if settings.database_url else "DEFAULT_CONNECTION"


_KEYWORD_ALIASES = {
    "host": "host",
    "server": "host",
    "port": "port",
    "database": "database",
    "username": "username",
    "user id": "username",
    "userid": "username",
    "user": "username",
    "password": "password",
    "ssl mode": "sslmode",
    "sslmode": "sslmode",
}


def normalize_connection_string(value: str) -> str:
    """Return a URL SQLAlchemy understands.

    Accepts plain SQLAlchemy URLs, the ``postgres://`` scheme cloud hosts hand
    out, and ``Host=...;Port=...;Password=...;`` keyword strings.
    """
    value = value.strip()
    if value.startswith("postgres://"):
        return "postgresql://" + value[len("postgres://"):]
    if "://" in value:
        return value
    if "=" not in value:
        raise ConfigurationError("Connection string is not a URL nor a keyword list")

    parts = {}
    for item in value.split(";"):
        if not item.strip():
            continue
        key, _, raw = item.partition("=")
        name = _KEYWORD_ALIASES.get(key.strip().lower())
        if name:
            parts[name] = raw.strip()

    if "host" not in parts:
        raise ConfigurationError("Connection string has no Host entry")

    query = {}
    if parts.get("sslmode"):
        query["sslmode"] = parts["sslmode"].lower()

    url = URL.create(
        "postgresql+psycopg2",
        username=parts.get("username"),
        password=parts.get("password"),
        host=parts["host"],
        port=int(parts["port"]) if parts.get("port") else None,
        database=parts.get("database"),
        query=query,
    )
    return url.render_as_string(hide_password=False)


def resolve_bind(settings: Settings) -> Tuple[str, int]:
    """Loopback only in Development, every interface anywhere else."""
    port = settings.port or DEFAULT_PORT
    host = "127.0.0.1" if settings.is_development else "0.0.0.0"
    return host, int(port)
