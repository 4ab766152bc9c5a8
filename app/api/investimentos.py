from collections import defaultdict
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from app.database import get_session
from app.dependencies import get_validator
from app.models.investimento import Investimento
from app.models.user_profile import UserProfile
from app.schemas.investimento import (
    InvestimentoCreate,
    InvestimentoRead,
    InvestimentoUpdate,
    ResumoInvestimentos,
    ResumoTipo,
)
from app.services.b3_validation import B3ValidationService
from app.utils.timestamps import utc_now

router = APIRouter(prefix="/api/investimentos", tags=["investimentos"])


def _get_or_404(session: Session, investimento_id: int) -> Investimento:
    investimento = session.get(Investimento, investimento_id)
    if not investimento:
        raise HTTPException(status_code=404, detail="Investimento não encontrado")
    return investimento


def _validate(validator: B3ValidationService, tipo: str, codigo: str, operacao: str) -> None:
    errors = validator.validate(tipo, codigo, operacao)
    if errors:
        raise HTTPException(status_code=422, detail=errors)


@router.post("/", response_model=InvestimentoRead, status_code=201)
def create_investimento(
    data: InvestimentoCreate,
    session: Session = Depends(get_session),
    validator: B3ValidationService = Depends(get_validator),
):
    if not session.get(UserProfile, data.user_id):
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    _validate(validator, data.tipo, data.codigo, data.operacao)

    investimento = Investimento(
        user_id=data.user_id,
        user_cpf=data.user_cpf,
        tipo=validator.normalize_tipo(data.tipo),
        codigo=validator.normalize_codigo(data.codigo),
        valor=data.valor,
        operacao=validator.normalize_operacao(data.operacao),
    )
    session.add(investimento)
    session.commit()
    session.refresh(investimento)
    return investimento


@router.get("/", response_model=List[InvestimentoRead])
def list_investimentos(
    user_id: Optional[int] = Query(None),
    tipo: Optional[str] = Query(None),
    operacao: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(get_session),
    validator: B3ValidationService = Depends(get_validator),
):
    query = select(Investimento)
    if user_id is not None:
        query = query.where(Investimento.user_id == user_id)
    if tipo:
        query = query.where(Investimento.tipo == validator.normalize_tipo(tipo))
    if operacao:
        query = query.where(Investimento.operacao == validator.normalize_operacao(operacao))
    return session.exec(query.order_by(Investimento.id).offset(skip).limit(limit)).all()


@router.get("/resumo/{user_id}", response_model=ResumoInvestimentos)
def resumo_investimentos(user_id: int, session: Session = Depends(get_session)):
    if not session.get(UserProfile, user_id):
        raise HTTPException(status_code=404, detail="Perfil não encontrado")

    investimentos = session.exec(select(Investimento).where(Investimento.user_id == user_id)).all()

    por_tipo = defaultdict(ResumoTipo)
    for inv in investimentos:
        resumo = por_tipo[inv.tipo]
        valor = Decimal(inv.valor)
        if inv.operacao == "venda":
            resumo.vendas += valor
        else:
            resumo.compras += valor
        resumo.saldo = resumo.compras - resumo.vendas
        resumo.quantidade += 1

    total_compras = sum((r.compras for r in por_tipo.values()), Decimal("0"))
    total_vendas = sum((r.vendas for r in por_tipo.values()), Decimal("0"))
    return ResumoInvestimentos(
        user_id=user_id,
        por_tipo=dict(por_tipo),
        total_compras=total_compras,
        total_vendas=total_vendas,
        saldo=total_compras - total_vendas,
    )


@router.get("/{investimento_id}", response_model=InvestimentoRead)
def get_investimento(investimento_id: int, session: Session = Depends(get_session)):
    return _get_or_404(session, investimento_id)


@router.put("/{investimento_id}", response_model=InvestimentoRead)
def update_investimento(
    investimento_id: int,
    data: InvestimentoUpdate,
    session: Session = Depends(get_session),
    validator: B3ValidationService = Depends(get_validator),
):
    investimento = _get_or_404(session, investimento_id)
    changes = data.model_dump(exclude_unset=True)

    tipo = changes.get("tipo") or investimento.tipo
    codigo = changes.get("codigo") or investimento.codigo
    operacao = changes.get("operacao") or investimento.operacao
    _validate(validator, tipo, codigo, operacao)

    investimento.tipo = validator.normalize_tipo(tipo)
    investimento.codigo = validator.normalize_codigo(codigo)
    investimento.operacao = validator.normalize_operacao(operacao)
    if changes.get("valor") is not None:
        investimento.valor = changes["valor"]
    investimento.alterado_em = utc_now()

    session.add(investimento)
    session.commit()
    session.refresh(investimento)
    return investimento


@router.delete("/{investimento_id}")
def delete_investimento(investimento_id: int, session: Session = Depends(get_session)):
    investimento = _get_or_404(session, investimento_id)
    session.delete(investimento)
    session.commit()
    return {"message": "Investimento removido com sucesso"}
