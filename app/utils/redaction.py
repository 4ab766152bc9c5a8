# app/utils/redaction.py

from typing import Iterable, Optional, Tuple
from urllib.parse import quote

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

MASK = "***"


class Redactor:
    """Masks known secrets with a plain substring replace.

    Not secret-aware: any text equal to a secret is masked, wherever it
    appears in the string.
    """

    def __init__(self, secrets: Iterable[Optional[str]] = ()):
        unique = []
        for secret in secrets:
            if secret and secret not in unique:
                unique.append(secret)
        # Segredos mais longos primeiro, senão um prefixo deixa sobras
        self.secrets: Tuple[str, ...] = tuple(sorted(unique, key=len, reverse=True))

    def redact(self, text: Optional[str]) -> Optional[str]:
        if text is None:
            return None
        for secret in self.secrets:
            text = text.replace(secret, MASK)
        return text

    @classmethod
    def for_connection_string(cls, connection_string: str, explicit: Optional[str] = None) -> "Redactor":
        # A senha explícita e a da URL podem divergir: mascara as duas
        passwords = [p for p in (explicit, password_from_connection_string(connection_string)) if p]
        return cls(passwords + [quote(p, safe="") for p in passwords])


def password_from_connection_string(connection_string: str) -> Optional[str]:
    try:
        return make_url(connection_string).password
    except ArgumentError:
        return None
