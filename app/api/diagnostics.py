from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_diagnostics
from app.services.diagnostics import DatabaseDiagnostics

router = APIRouter(prefix="/api/TestConnection", tags=["diagnostics"])

# Falha de dependência (banco) sempre vira 503, nos dois endpoints
DEPENDENCY_FAILURE = 503


@router.get(
    "/test-connection",
    summary="Testa conexão com o banco",
    responses={503: {"description": "Erro de conexão"}},
)
def connection_report(diagnostics: DatabaseDiagnostics = Depends(get_diagnostics)):
    report = diagnostics.test_connection()
    status_code = 200 if report["status"] == "success" else DEPENDENCY_FAILURE
    return JSONResponse(status_code=status_code, content=report)


@router.get("/test-tables", summary="Lista as tabelas conhecidas que existem")
def tables_report(diagnostics: DatabaseDiagnostics = Depends(get_diagnostics)):
    report = diagnostics.test_tables()
    status_code = 200 if report["status"] == "success" else DEPENDENCY_FAILURE
    return JSONResponse(status_code=status_code, content=report)


@router.get("/test-different-formats", summary="Testa variações da connection string")
def formats_report(diagnostics: DatabaseDiagnostics = Depends(get_diagnostics)):
    return diagnostics.test_different_formats()
