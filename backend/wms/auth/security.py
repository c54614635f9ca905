# =============================================================================
# GIGA WMS v1.0 - SECURITY
# =============================================================================
# Identificazione utente dalla richiesta: JWT nell'header
# "Authorization: Bearer <token>". L'emissione dei token è esterna.
#
# CONFIGURAZIONE:
# - JWT_SECRET_KEY: chiave segreta per firma JWT (CAMBIARE IN PRODUZIONE!)
# - JWT_ALGORITHM: algoritmo firma (HS256)
# =============================================================================

from typing import Any, Dict, Optional

import jwt
from fastapi import Request

from ..config import config


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decodifica e valida un JWT token.

    Args:
        token: JWT string da header Authorization

    Returns:
        Payload se token valido, None se invalido/scaduto

    Verifiche effettuate:
    1. Firma valida (token non manomesso)
    2. Token non scaduto (exp > now)
    """
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        # Token scaduto (exp < now)
        return None
    except jwt.InvalidTokenError:
        # Firma invalida, formato errato, etc.
        return None


def get_username_from_request(request: Request) -> Optional[str]:
    """Username dal claim `username` del bearer token, None se assente o non valido."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    payload = decode_access_token(token.strip())
    if not payload:
        return None

    username = payload.get("username")
    return str(username) if username else None
