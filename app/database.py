import logging
import time
from typing import Callable, Iterator, TypeVar

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import Settings
from app.core.errors import classify_error, is_transient_error
from app.utils.redaction import Redactor

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = "public"
BASE_RETRY_DELAY = 1.0


def connect_with_retry(
    connect: Callable[[], T],
    max_retry_count: int,
    max_retry_delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``connect`` retrying transient failures with capped exponential backoff."""
    attempt = 0
    while True:
        try:
            return connect()
        except Exception as exc:
            if attempt >= max_retry_count or not is_transient_error(exc):
                raise
            delay = min(max_retry_delay, BASE_RETRY_DELAY * (2 ** attempt))
            attempt += 1
            logger.warning(
                "Transient database failure (%s), retry %d/%d in %.1fs",
                classify_error(exc).value,
                attempt,
                max_retry_count,
                delay,
            )
            sleep(delay)


def install_retry_policy(engine: Engine, max_retry_count: int, max_retry_delay: float) -> None:
    @event.listens_for(engine, "do_connect")
    def _connect(dialect, conn_rec, cargs, cparams):
        return connect_with_retry(
            lambda: dialect.connect(*cargs, **cparams),
            max_retry_count,
            max_retry_delay,
        )


def install_command_timeout(engine: Engine, seconds: int) -> None:
    @event.listens_for(engine, "connect")
    def _set_statement_timeout(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute(f"SET statement_timeout = {int(seconds) * 1000}")
        cursor.close()


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # Sem isso o SQLite ignora o ON DELETE CASCADE
    @event.listens_for(engine, "connect")
    def _pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(connection_string: str, settings: Settings) -> Engine:
    """ORM engine: retry-on-failure and command timeout on PostgreSQL.

    SQLite URLs are accepted for local development and tests; the ``public``
    schema is translated away since SQLite has no schemas.
    """
    url = make_url(connection_string)

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.sql_echo, **kwargs)
        _enable_sqlite_foreign_keys(engine)
        return engine.execution_options(schema_translate_map={SCHEMA: None})

    engine = create_engine(
        url,
        echo=settings.sql_echo,
        pool_pre_ping=True,
        connect_args={"connect_timeout": settings.db_connect_timeout},
    )
    install_retry_policy(engine, settings.db_max_retry_count, settings.db_max_retry_delay)
    install_command_timeout(engine, settings.db_command_timeout)
    return engine


def create_db_and_tables(engine: Engine) -> None:
    from app.models import Investimento, UserProfile  # noqa: F401  registra os modelos
    SQLModel.metadata.create_all(engine)


def prewarm_database(engine: Engine, redactor: Redactor = Redactor()) -> bool:
    """Probe the database and make sure the tables exist. Never raises."""
    logger.info("Testando conexão com banco de dados...")
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Conexão com banco de dados estabelecida com sucesso")
        create_db_and_tables(engine)
        logger.info("Tabelas verificadas/criadas com sucesso")
        return True
    except Exception as exc:
        logger.error(
            "Erro ao conectar com banco de dados (%s): %s",
            classify_error(exc).value,
            redactor.redact(str(exc)),
        )
        return False


def get_session(request: Request) -> Iterator[Session]:
    engine = request.app.state.container.engine
    with Session(engine) as session:
        yield session
