# =============================================================================
# GIGA WMS v1.0 - CONTESTO RICHIESTA
# =============================================================================
# Metadati della richiesta HTTP in corso (utente, IP, URL, metodo, UA),
# letti dal logger e popolati dal middleware.
# =============================================================================

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Optional

from fastapi import Request


@dataclass
class RequestContext:
    """Metadati della richiesta corrente."""
    ip: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None
    user_agent: Optional[str] = None
    username: Optional[str] = None
    session_id: Optional[str] = None

    @classmethod
    def from_request(
        cls,
        request: Request,
        username: Optional[str] = None,
        session_id: Optional[str] = None
    ) -> "RequestContext":
        return cls(
            ip=get_client_ip(request),
            url=str(request.url),
            method=request.method,
            user_agent=get_user_agent(request),
            username=username,
            session_id=session_id,
        )


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "wms_request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """Contesto della richiesta in corso, None fuori da una richiesta."""
    return _request_context.get()


def set_request_context(context: Optional[RequestContext]) -> Token:
    return _request_context.set(context)


def reset_request_context(token: Token) -> None:
    _request_context.reset(token)


# =============================================================================
# ESTRAZIONE INFO REQUEST
# =============================================================================

def get_client_ip(request: Request) -> str:
    """
    Estrae IP client dalla request.

    Gestisce proxy (header X-Forwarded-For): "client, proxy1, proxy2",
    prendiamo il primo (client originale).
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def get_user_agent(request: Request) -> str:
    """Estrae User-Agent dalla request."""
    return request.headers.get("User-Agent", "unknown")
