# app/services/diagnostics.py

"""Database connectivity diagnostics.

Every operation opens its own connection through a ``NullPool`` engine, so
nothing is shared between requests and no retry policy hides a failure.
Connection strings and driver messages are redacted before they reach a
response or a log line.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import bindparam, create_engine, func, select, table, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.pool import NullPool

from app.core.errors import classify_error
from app.utils.redaction import Redactor
from app.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

SCHEMA = "public"
KNOWN_TABLES = ("user_profiles", "investimentos")
PROBE_PORTS = (6543, 5432)

SUGGESTIONS = [
    "Verifique se o banco de dados (Supabase) está online",
    "Confirme as credenciais na connection string",
    "Verifique se as tabelas foram criadas",
    "Teste a conectividade de rede",
]

TABLES_QUERY = text(
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = :schema AND table_name IN :names "
    "ORDER BY table_name"
).bindparams(bindparam("names", expanding=True))


def probe_variants(connection_string: str) -> List[str]:
    """Candidate strings varying the pooler port and the username format.

    Supabase accepts ``postgres.<project-ref>`` on the pooler and plain
    ``postgres`` on direct connections; both ports are tried for each.
    """
    try:
        url = make_url(connection_string)
    except ArgumentError:
        return [connection_string]
    if url.get_backend_name() != "postgresql" or not url.host:
        return [connection_string]

    full = url.username or "postgres"
    short = full.split(".", 1)[0]
    return [
        url.set(port=port, username=username).render_as_string(hide_password=False)
        for username in (full, short)
        for port in PROBE_PORTS
    ]


class DatabaseDiagnostics:
    def __init__(
        self,
        connection_string: str,
        redactor: Redactor,
        connect_timeout: int = 15,
        probe_candidates: Optional[Sequence[str]] = None,
        engine_factory: Callable[..., Engine] = create_engine,
    ):
        self.connection_string = connection_string
        self.redactor = redactor
        self.connect_timeout = connect_timeout
        self.probe_candidates = list(probe_candidates or probe_variants(connection_string))
        self._engine_factory = engine_factory
        self._engine: Optional[Engine] = None

    @property
    def safe_connection_string(self) -> str:
        return self.redactor.redact(self.connection_string)

    def _create_engine(self, connection_string: str) -> Engine:
        url = make_url(connection_string)
        connect_args = {}
        if url.get_backend_name() == "postgresql":
            connect_args["connect_timeout"] = self.connect_timeout
        return self._engine_factory(url, poolclass=NullPool, connect_args=connect_args)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine(self.connection_string)
        return self._engine

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # --- consultas ---

    def _existing_tables(self, connection: Connection) -> List[str]:
        rows = connection.execute(TABLES_QUERY, {"schema": SCHEMA, "names": list(KNOWN_TABLES)})
        return sorted(rows.scalars().all())

    def _count(self, connection: Connection, name: str) -> int:
        query = select(func.count()).select_from(table(name, schema=SCHEMA))
        return int(connection.execute(query).scalar_one())

    def _failure(self, exc: Exception, redactor: Optional[Redactor] = None) -> Dict[str, Any]:
        redactor = redactor or self.redactor
        kind = classify_error(exc)
        message = redactor.redact(str(getattr(exc, "orig", None) or exc))
        logger.error("Connection error (%s): %s", kind.value, message)
        return {
            "status": "error",
            "message": message,
            "error_kind": kind.value,
            "timestamp": utc_timestamp(),
        }

    # --- operações ---

    def test_connection(self) -> Dict[str, Any]:
        safe = self.safe_connection_string
        logger.info("Testing connection: %s", safe)
        try:
            with self.engine.connect() as connection:
                version = connection.execute(text("SELECT version()")).scalar_one()
                existing = self._existing_tables(connection)
                counts = {
                    name: self._count(connection, name) if name in existing else None
                    for name in KNOWN_TABLES
                }
        except Exception as exc:
            report = self._failure(exc)
            report["connection_string"] = safe
            report["suggestions"] = list(SUGGESTIONS)
            return report

        logger.info("Connection opened successfully, tables found: %s", existing)
        return {
            "status": "success",
            "message": "Conexão estabelecida com sucesso!",
            "database": {
                "version": str(version),
                "host": make_url(self.connection_string).host,
                "provider": "PostgreSQL",
            },
            "tables": {"existing": existing, "counts": counts},
            "timestamp": utc_timestamp(),
            "connection_string": safe,
        }

    def test_tables(self) -> Dict[str, Any]:
        try:
            with self.engine.connect() as connection:
                existing = self._existing_tables(connection)
        except Exception as exc:
            return self._failure(exc)
        return {
            "status": "success",
            "message": "Tabelas verificadas com sucesso!",
            "existing_tables": existing,
        }

    def test_different_formats(self) -> List[Dict[str, Any]]:
        results = []
        for index, candidate in enumerate(self.probe_candidates, start=1):
            redactor = Redactor(self.redactor.secrets + Redactor.for_connection_string(candidate).secrets)
            safe = redactor.redact(candidate)
            engine = None
            try:
                engine = self._create_engine(candidate)
                with engine.connect():
                    pass
                results.append({"test": index, "status": "success", "connection_string": safe})
            except Exception as exc:
                failure = self._failure(exc, redactor)
                results.append({
                    "test": index,
                    "status": "error",
                    "message": failure["message"],
                    "error_kind": failure["error_kind"],
                    "connection_string": safe,
                })
            finally:
                if engine is not None:
                    engine.dispose()
        return results

    def can_connect(self) -> Tuple[bool, Optional[Exception]]:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as exc:
            return False, exc
        return True, None
