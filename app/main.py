import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import diagnostics, investimentos, system, user_profiles
from app.core.config import Settings, connection_string_source, load_settings, resolve_bind
from app.database import prewarm_database
from app.dependencies import AppContainer, build_container
from app.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "API para gerenciamento de investimentos e perfis de usuário, "
    "com endpoints de diagnóstico da conexão com o banco."
)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


async def _prewarm_later(app: FastAPI) -> None:
    container: AppContainer = app.state.container
    await asyncio.sleep(container.settings.prewarm_delay)
    # A thread não pode ser cancelada: o shutdown espera ela antes do dispose
    app.state.prewarm_worker = asyncio.ensure_future(
        asyncio.to_thread(prewarm_database, container.engine, container.redactor)
    )
    await asyncio.shield(app.state.prewarm_worker)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AppContainer = app.state.container
    settings = container.settings

    app.state.http_client = httpx.AsyncClient(timeout=10)

    # Pre-warm nunca bloqueia o startup por falha: só loga
    prewarm_task: Optional[asyncio.Task] = None
    app.state.prewarm_worker = None
    if settings.prewarm_mode == "inline":
        await asyncio.to_thread(prewarm_database, container.engine, container.redactor)
    elif settings.prewarm_mode == "detached":
        prewarm_task = asyncio.create_task(_prewarm_later(app))
    app.state.prewarm_task = prewarm_task

    yield

    if prewarm_task is not None and not prewarm_task.done():
        prewarm_task.cancel()
        with suppress(asyncio.CancelledError):
            await prewarm_task
    if app.state.prewarm_worker is not None:
        await app.state.prewarm_worker
    await app.state.http_client.aclose()
    container.diagnostics.dispose()
    container.engine.dispose()
    logger.info("Investimentos API encerrada")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Configure, build and wire the application. Nothing is registered after this."""
    settings = settings or load_settings()
    container = build_container(settings)

    app = FastAPI(
        title="Investimentos API",
        version=settings.app_version,
        description=DESCRIPTION,
        contact={"name": "Equipe Challenge XP", "email": "contato@challengexp.com"},
        license_info={"name": "MIT License", "url": "https://opensource.org/licenses/MIT"},
        docs_url="/swagger",
        redoc_url=None,
        openapi_url="/swagger/v1/swagger.json",
        swagger_ui_parameters={
            "docExpansion": "list",
            "defaultModelsExpandDepth": -1,
            "displayRequestDuration": True,
            "deepLinking": True,
            "filter": True,
        },
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Adicionado por último = middleware mais externo
    @app.middleware("http")
    async def translate_unhandled_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Exceção não tratada em %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal Server Error",
                    "message": container.redactor.redact(str(exc)),
                    "timestamp": utc_timestamp(),
                    "path": request.url.path,
                },
            )

    # Só chega aqui o que escapa do middleware acima
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Erro não tratado em %s %s: %s",
            request.method,
            request.url.path,
            container.redactor.redact(str(exc)),
        )
        return system.problem_response()

    app.include_router(system.router)
    app.include_router(diagnostics.router)
    app.include_router(user_profiles.router)
    app.include_router(investimentos.router)
    return app


def run() -> None:
    settings = load_settings()
    configure_logging(settings)
    logger.info("Iniciando aplicação...")

    app = create_app(settings)
    host, port = resolve_bind(settings)

    logger.info("Environment: %s", settings.app_env)
    logger.info("Port: %s", port)
    logger.info("Railway URL: %s", settings.railway_static_url)
    logger.info("Connection string source: %s", connection_string_source(settings))
    logger.info("Bind URL: http://%s:%s (Swagger em /swagger, health em /health)", host, port)

    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
