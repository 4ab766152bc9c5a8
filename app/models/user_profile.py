# app/models/user_profile.py

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


class UserProfile(SQLModel, table=True):
    __tablename__ = "user_profiles"
    __table_args__ = {"schema": "public"}

    id: Optional[int] = Field(default=None, primary_key=True)
    email: Optional[str] = Field(default=None, max_length=255)
    cpf: str = Field(max_length=11, unique=True, index=True)

    # Documento livre; só é validado onde algum campo é lido
    dados: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("dados", JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")),
    )

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

    # "nome" não é coluna: vive só nos schemas da API (ver app/schemas/user_profile.py)
