import logging
from dataclasses import dataclass

import httpx
from fastapi import Request
from sqlalchemy.engine import Engine

from app.core.config import Settings, connection_string_source, resolve_connection_string
from app.database import create_db_engine
from app.services.b3_validation import B3ValidationService
from app.services.diagnostics import DatabaseDiagnostics
from app.utils.redaction import Redactor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """Everything the app resolves once at startup. Frozen after build."""

    settings: Settings
    connection_string: str
    redactor: Redactor
    engine: Engine
    diagnostics: DatabaseDiagnostics
    validator: B3ValidationService


def build_container(settings: Settings) -> AppContainer:
    # Falha aqui aborta o processo: sem banco nenhum endpoint funciona
    connection_string = resolve_connection_string(settings)
    redactor = Redactor.for_connection_string(connection_string, settings.database_password)

    logger.info("Configurando SQLModel/SQLAlchemy...")
    logger.info("Connection string source: %s", connection_string_source(settings))
    engine = create_db_engine(connection_string, settings)
    logger.info(
        "Engine configurado: %s (retries=%d, max delay=%.0fs, command timeout=%ds)",
        redactor.redact(connection_string),
        settings.db_max_retry_count,
        settings.db_max_retry_delay,
        settings.db_command_timeout,
    )

    diagnostics = DatabaseDiagnostics(
        connection_string,
        redactor,
        connect_timeout=settings.db_connect_timeout,
        probe_candidates=settings.probe_connection_strings,
    )
    return AppContainer(
        settings=settings,
        connection_string=connection_string,
        redactor=redactor,
        engine=engine,
        diagnostics=diagnostics,
        validator=B3ValidationService(),
    )


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_diagnostics(request: Request) -> DatabaseDiagnostics:
    return request.app.state.container.diagnostics


def get_validator(request: Request) -> B3ValidationService:
    return request.app.state.container.validator


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client
