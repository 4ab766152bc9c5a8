# app/models/investimento.py

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, func
from sqlmodel import Field, SQLModel


class Investimento(SQLModel, table=True):
    __tablename__ = "investimentos"
    __table_args__ = {"schema": "public"}

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="public.user_profiles.id", ondelete="CASCADE")
    user_cpf: str = Field(max_length=11)
    tipo: str = Field(max_length=50)  # acao, fii, tesouro, cdb...
    codigo: str = Field(max_length=20)
    valor: Decimal = Field(max_digits=12, decimal_places=2)
    operacao: str = Field(max_length=20)  # compra / venda

    criado_em: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
    alterado_em: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
