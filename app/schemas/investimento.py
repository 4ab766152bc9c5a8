# app/schemas/investimento.py

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

Valor = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2, description="Valor da operação")]


class InvestimentoCreate(BaseModel):
    user_id: int
    user_cpf: str = Field(..., min_length=11, max_length=11, pattern=r"^\d{11}$")
    tipo: str = Field(..., min_length=1, max_length=50)
    codigo: str = Field(..., min_length=1, max_length=20)
    valor: Valor
    operacao: str = Field(..., min_length=1, max_length=20)


class InvestimentoUpdate(BaseModel):
    tipo: Optional[str] = Field(default=None, min_length=1, max_length=50)
    codigo: Optional[str] = Field(default=None, min_length=1, max_length=20)
    valor: Optional[Valor] = None
    operacao: Optional[str] = Field(default=None, min_length=1, max_length=20)


class InvestimentoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_cpf: str
    tipo: str
    codigo: str
    valor: Decimal
    operacao: str
    criado_em: Optional[datetime] = None
    alterado_em: Optional[datetime] = None


class ResumoTipo(BaseModel):
    compras: Decimal = Decimal("0")
    vendas: Decimal = Decimal("0")
    saldo: Decimal = Decimal("0")
    quantidade: int = 0


class ResumoInvestimentos(BaseModel):
    user_id: int
    por_tipo: Dict[str, ResumoTipo]
    total_compras: Decimal
    total_vendas: Decimal
    saldo: Decimal
