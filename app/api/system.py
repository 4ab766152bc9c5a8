import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from app.core.errors import classify_error
from app.dependencies import AppContainer, get_container
from app.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])

PROBLEM = {
    "type": "about:blank",
    "title": "Erro interno do servidor",
    "status": 500,
    "detail": "Ocorreu um erro inesperado. Verifique os logs para mais detalhes.",
}


def problem_response() -> JSONResponse:
    return JSONResponse(status_code=500, content=PROBLEM, media_type="application/problem+json")


@router.get("/", include_in_schema=False)
def root():
    logger.info("Root endpoint chamado - redirecionando para /swagger")
    return RedirectResponse(url="/swagger")


@router.get("/ping")
def ping():
    return {"message": "pong", "timestamp": utc_timestamp(), "status": "API está funcionando!"}


@router.get("/error", include_in_schema=False)
def error():
    return problem_response()


@router.get("/health")
def health(container: AppContainer = Depends(get_container)):
    # Não toca no banco: tem que responder mesmo com o banco fora do ar
    return {
        "status": "Healthy",
        "timestamp": utc_timestamp(),
        "version": container.settings.app_version,
        "environment": container.settings.app_env,
    }


@router.get("/health/database")
def health_database(container: AppContainer = Depends(get_container)):
    ok, exc = container.diagnostics.can_connect()
    if ok:
        return {"status": "Healthy", "database": "Connected", "timestamp": utc_timestamp()}

    error = container.redactor.redact(str(getattr(exc, "orig", None) or exc))
    logger.error("Database health check error: %s", error)
    return JSONResponse(
        status_code=503,
        content={
            "status": "Unhealthy",
            "database": "Disconnected",
            "error_kind": classify_error(exc).value,
            "error": error,
            "timestamp": utc_timestamp(),
        },
    )
