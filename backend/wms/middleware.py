# =============================================================================
# GIGA WMS v1.0 - MIDDLEWARE
# =============================================================================
# Per ogni richiesta HTTP: utente (bearer token), contesto richiesta per il
# logger, sessione via cookie per browser e utenti autenticati.
# =============================================================================

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .auth.security import get_username_from_request
from .config import config
from .context import RequestContext, reset_request_context, set_request_context
from .services.sessions import SessionTracker, session_tracker


def _is_browser(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Popola il contesto richiesta e tiene traccia delle sessioni."""

    def __init__(self, app, tracker: SessionTracker = None):
        super().__init__(app)
        self.tracker = tracker or session_tracker

    async def dispatch(self, request: Request, call_next):
        cookie = request.cookies.get(config.SESSION_COOKIE)
        username = get_username_from_request(request)

        # Client API senza cookie né utente: nessuna sessione
        session, is_new = None, False
        if cookie or username or _is_browser(request):
            session, is_new = self.tracker.touch(cookie, username)
            username = session.username

        context = RequestContext.from_request(
            request,
            username=username,
            session_id=session.session_id if session else None
        )
        request.state.request_context = context
        token = set_request_context(context)
        try:
            response = await call_next(request)
        finally:
            reset_request_context(token)

        if is_new:
            response.set_cookie(
                config.SESSION_COOKIE,
                session.session_id,
                httponly=True,
                samesite="lax"
            )
        return response
