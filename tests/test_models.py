from decimal import Decimal

import pytest
from sqlalchemy import Numeric, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.database import create_db_and_tables, create_db_engine
from app.models import Investimento, UserProfile
from tests.conftest import make_settings


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", make_settings())
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


def test_user_profile_mapping():
    table = UserProfile.__table__
    assert table.name == "user_profiles"
    assert table.schema == "public"
    assert set(table.columns.keys()) == {"id", "email", "cpf", "dados", "criado_em", "alterado_em"}
    assert "nome" not in table.columns
    assert table.c.cpf.nullable is False
    assert table.c.cpf.type.length == 11
    assert table.c.email.type.length == 255
    assert any(index.unique and [c.name for c in index.columns] == ["cpf"] for index in table.indexes)
    assert table.c.criado_em.server_default is not None
    assert table.c.alterado_em.server_default is not None


def test_investimento_mapping():
    table = Investimento.__table__
    assert table.name == "investimentos"
    assert table.schema == "public"
    assert set(table.columns.keys()) == {
        "id", "user_id", "user_cpf", "tipo", "codigo", "valor", "operacao", "criado_em", "alterado_em",
    }
    assert table.c.codigo.type.length == 20
    assert table.c.operacao.type.length == 20
    assert table.c.user_cpf.type.length == 11
    assert isinstance(table.c.valor.type, Numeric)
    assert (table.c.valor.type.precision, table.c.valor.type.scale) == (12, 2)

    (fk,) = table.c.user_id.foreign_keys
    assert fk.target_fullname == "public.user_profiles.id"
    assert fk.ondelete == "CASCADE"


def test_timestamps_default_on_insert(engine):
    with Session(engine) as session:
        profile = UserProfile(cpf="11122233344", dados={"nome": "Bia"})
        session.add(profile)
        session.commit()
        session.refresh(profile)
        assert profile.id is not None
        assert profile.criado_em is not None
        assert profile.alterado_em is not None
        assert profile.dados == {"nome": "Bia"}


def test_duplicate_cpf_is_rejected(engine):
    with Session(engine) as session:
        session.add(UserProfile(cpf="11122233344"))
        session.commit()

        session.add(UserProfile(cpf="11122233344"))
        with pytest.raises(IntegrityError):
            session.commit()


def test_deleting_profile_cascades_to_investimentos(engine):
    with Session(engine) as session:
        profile = UserProfile(cpf="11122233344")
        session.add(profile)
        session.commit()
        session.refresh(profile)
        profile_id = profile.id

        session.add(Investimento(
            user_id=profile.id, user_cpf=profile.cpf, tipo="acao",
            codigo="PETR4", valor=Decimal("150.25"), operacao="compra",
        ))
        session.add(Investimento(
            user_id=profile.id, user_cpf=profile.cpf, tipo="fii",
            codigo="HGLG11", valor=Decimal("99.90"), operacao="compra",
        ))
        session.commit()

    with Session(engine) as session:
        session.delete(session.get(UserProfile, profile_id))
        session.commit()

    with Session(engine) as session:
        assert session.exec(select(func.count()).select_from(Investimento)).one() == 0


def test_investimento_requires_existing_profile(engine):
    with Session(engine) as session:
        session.add(Investimento(
            user_id=999, user_cpf="11122233344", tipo="acao",
            codigo="VALE3", valor=Decimal("10.00"), operacao="compra",
        ))
        with pytest.raises(IntegrityError):
            session.commit()
