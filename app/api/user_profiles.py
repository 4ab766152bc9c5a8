from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.database import get_session
from app.models.investimento import Investimento
from app.models.user_profile import UserProfile
from app.schemas.investimento import InvestimentoRead
from app.schemas.user_profile import UserProfileCreate, UserProfileRead, UserProfileUpdate
from app.utils.timestamps import utc_now

router = APIRouter(prefix="/api/user-profiles", tags=["user_profiles"])

CPF_DUPLICADO = "Já existe um perfil com este CPF."


def _get_or_404(session: Session, profile_id: int) -> UserProfile:
    profile = session.get(UserProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    return profile


@router.post("/", response_model=UserProfileRead, status_code=201)
def create_user_profile(data: UserProfileCreate, session: Session = Depends(get_session)):
    # "nome" fica de fora: não é coluna
    profile = UserProfile(**data.model_dump(exclude={"nome"}))
    session.add(profile)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=CPF_DUPLICADO)
    session.refresh(profile)

    result = UserProfileRead.model_validate(profile)
    if data.nome is not None:
        result.nome = data.nome
    return result


@router.get("/", response_model=List[UserProfileRead])
def list_user_profiles(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(get_session),
):
    return session.exec(select(UserProfile).order_by(UserProfile.id).offset(skip).limit(limit)).all()


@router.get("/{profile_id}", response_model=UserProfileRead)
def get_user_profile(profile_id: int, session: Session = Depends(get_session)):
    return _get_or_404(session, profile_id)


@router.get("/{profile_id}/investimentos", response_model=List[InvestimentoRead])
def list_user_investimentos(profile_id: int, session: Session = Depends(get_session)):
    _get_or_404(session, profile_id)
    return session.exec(
        select(Investimento)
        .where(Investimento.user_id == profile_id)
        .order_by(Investimento.id)
    ).all()


@router.put("/{profile_id}", response_model=UserProfileRead)
def update_user_profile(profile_id: int, data: UserProfileUpdate, session: Session = Depends(get_session)):
    profile = _get_or_404(session, profile_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "cpf" and value is None:
            continue
        setattr(profile, field, value)
    # O default do banco só vale no INSERT
    profile.alterado_em = utc_now()

    session.add(profile)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=CPF_DUPLICADO)
    session.refresh(profile)
    return profile


@router.delete("/{profile_id}")
def delete_user_profile(profile_id: int, session: Session = Depends(get_session)):
    profile = _get_or_404(session, profile_id)
    # ON DELETE CASCADE remove os investimentos do perfil
    session.delete(profile)
    session.commit()
    return {"message": "Perfil removido com sucesso"}
