import pytest
from sqlalchemy.engine import make_url

from app.core.config import (
    Settings,
    connection_string_source,
    normalize_connection_string,
    resolve_bind,
    resolve_connection_string,
)
from app.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "DEFAULT_CONNECTION", "PORT", "APP_ENV"):
        monkeypatch.delenv(name, raising=False)


def test_database_url_overrides_named_entry():
    settings = Settings(
        database_url="postgresql://u:p@override:5432/db",
        default_connection="postgresql://u:p@fallback:5432/db",
    )
    assert make_url(resolve_connection_string(settings)).host == "override"
    assert connection_string_source(settings) == "DATABASE_URL"


def test_named_entry_used_without_override():
    settings = Settings(default_connection="postgresql://u:p@fallback:5432/db")
    assert make_url(resolve_connection_string(settings)).host == "fallback"
    assert connection_string_source(settings) == "DEFAULT_CONNECTION"


def test_environment_variable_is_read(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@from-env:5432/db")
    assert make_url(resolve_connection_string(Settings())).host == "from-env"


def test_missing_connection_string_is_fatal():
    with pytest.raises(ConfigurationError):
        resolve_connection_string(Settings())


def test_postgres_scheme_is_rewritten():
    assert normalize_connection_string("postgres://u:p@h:5432/db") == "postgresql://u:p@h:5432/db"


def test_keyword_connection_string_becomes_url():
    value = (
        "Host=aws-0-us-east-2.pooler.supabase.com;Port=6543;Database=postgres;"
        "Username=postgres.meawpenz;Password=ju153074;Ssl Mode=Require;"
    )
    url = make_url(normalize_connection_string(value))
    assert url.drivername == "postgresql+psycopg2"
    assert url.host == "aws-0-us-east-2.pooler.supabase.com"
    assert url.port == 6543
    assert url.database == "postgres"
    assert url.username == "postgres.meawpenz"
    assert url.password == "ju153074"
    assert url.query["sslmode"] == "require"


def test_keyword_connection_string_without_host_is_rejected():
    with pytest.raises(ConfigurationError):
        normalize_connection_string("Port=5432;Database=postgres;")


def test_bind_development_is_loopback_with_default_port():
    assert resolve_bind(Settings(app_env="Development")) == ("127.0.0.1", 8080)


def test_bind_other_environments_listen_everywhere():
    assert resolve_bind(Settings(app_env="Production", port="3000")) == ("0.0.0.0", 3000)
    assert resolve_bind(Settings(app_env="Staging")) == ("0.0.0.0", 8080)


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    assert resolve_bind(Settings()) == ("0.0.0.0", 9090)
