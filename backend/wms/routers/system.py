# =============================================================================
# GIGA WMS v1.0 - SYSTEM ROUTER
# =============================================================================
# Stato dell'applicazione: versione, utenti online, uptime
# =============================================================================

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request

from ..services.sessions import session_tracker


router = APIRouter(prefix="/system")


@router.get("/info")
async def system_info(request: Request) -> Dict[str, Any]:
    """Stato applicazione registrato all'avvio più utenti online e uptime."""
    state = request.app.state
    start_time = getattr(state, "start_time", None)
    uptime = (datetime.now() - start_time).total_seconds() if start_time else 0

    return {
        "success": True,
        "data": {
            "system_name": getattr(state, "system_name", None),
            "system_version": getattr(state, "system_version", None),
            "company_name": getattr(state, "company_name", None),
            "start_time": start_time.isoformat() if start_time else None,
            "uptime_seconds": int(uptime),
            "online_users": session_tracker.online_users,
        }
    }
