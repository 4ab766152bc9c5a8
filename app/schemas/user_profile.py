# app/schemas/user_profile.py

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UserProfileCreate(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    cpf: str = Field(..., min_length=11, max_length=11, pattern=r"^\d{11}$", description="CPF só com dígitos")
    dados: Optional[Dict[str, Any]] = None
    nome: Optional[str] = Field(default=None, description="Não é persistido")


class UserProfileUpdate(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    cpf: Optional[str] = Field(default=None, min_length=11, max_length=11, pattern=r"^\d{11}$")
    dados: Optional[Dict[str, Any]] = None


class UserProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    cpf: str
    dados: Optional[Dict[str, Any]] = None
    nome: Optional[str] = None
    criado_em: Optional[datetime] = None
    alterado_em: Optional[datetime] = None

    @model_validator(mode="after")
    def _nome_from_dados(self):
        # O nome só existe em memória; quando vem, vem de dentro de "dados"
        if self.nome is None and isinstance(self.dados, dict):
            nome = self.dados.get("nome")
            if isinstance(nome, str):
                self.nome = nome
        return self
