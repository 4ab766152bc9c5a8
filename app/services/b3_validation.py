# app/services/b3_validation.py

import re
from typing import Dict, List

# Tipos negociados na B3, onde o código precisa ter formato de ticker
LISTED_TYPES = {"acao", "ação", "fii", "etf", "bdr"}

# PETR4, VALE3, HGLG11, BOVA11, AAPL34, TAEE11, KLBN11B...
_TICKER = re.compile(r"^[A-Z]{4}(3|4|5|6|7|8|11|31|32|33|34|35)[A-Z]?$")

_OPERACOES: Dict[str, str] = {
    "compra": "compra",
    "buy": "compra",
    "c": "compra",
    "venda": "venda",
    "sell": "venda",
    "v": "venda",
}


class B3ValidationService:
    """Checks instrument codes and operation kinds before they are stored."""

    def normalize_tipo(self, tipo: str) -> str:
        return tipo.strip().lower()

    def normalize_codigo(self, codigo: str) -> str:
        return codigo.strip().upper()

    def normalize_operacao(self, operacao: str) -> str:
        return _OPERACOES.get(operacao.strip().lower(), operacao.strip().lower())

    def is_valid_ticker(self, codigo: str) -> bool:
        return bool(_TICKER.match(self.normalize_codigo(codigo)))

    def validate(self, tipo: str, codigo: str, operacao: str) -> List[str]:
        errors = []
        if self.normalize_tipo(tipo) in LISTED_TYPES and not self.is_valid_ticker(codigo):
            errors.append(f"Código '{codigo}' não é um ticker válido da B3")
        if self.normalize_operacao(operacao) not in ("compra", "venda"):
            errors.append(f"Operação '{operacao}' inválida: use compra ou venda")
        return errors
