"""
Connect Vida - Security
Validação dos tokens emitidos pelo provedor de autenticação.
O login e a emissão de tokens ficam no provedor; aqui apenas verificamos.
"""
import logging
from typing import Optional

from jose import jwt, JWTError

from .config import settings

logger = logging.getLogger(__name__)


def verify_access_token(token: str) -> Optional[dict]:
    """
    Verifica JWT token do provedor de autenticação.
    Retorna os claims ou None se inválido/expirado.
    """
    options = {"verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options
        )
    except JWTError as e:
        logger.warning(f"Token rejeitado: {e}")
        return None

    if not payload.get("sub"):
        logger.warning("Token sem claim 'sub'")
        return None

    return payload
