# =============================================================================
# GIGA WMS v1.0 - FASTAPI MAIN
# =============================================================================
# Host applicazione: avvio/arresto, sessioni, errori non gestiti
# =============================================================================

import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .config import config
from .database_pg import check_connection, close_pool, init_pool
from .log_helper import configure_logging, write_error_log, write_info_log
from .middleware import RequestContextMiddleware
from .routers import inventory, outbound, system
from .services.sessions import session_tracker


# =============================================================================
# LIFESPAN - Startup/Shutdown
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestisce startup e shutdown dell'applicazione."""
    # Startup
    os.makedirs(config.LOG_PATH, exist_ok=True)
    configure_logging(config.LOG_PATH)

    init_pool()

    app.state.system_name = config.SYSTEM_NAME
    app.state.system_version = config.SYSTEM_VERSION
    app.state.company_name = config.COMPANY_NAME
    app.state.start_time = datetime.now()

    session_tracker.start_sweeper()
    write_info_log("Avvio applicazione", "Sistema")

    yield

    # Shutdown
    session_tracker.stop_sweeper()
    close_pool()
    write_info_log("Arresto applicazione", "Sistema")


# =============================================================================
# APP FASTAPI
# =============================================================================

app = FastAPI(
    title="GIGA WMS API",
    description="Gestione magazzino: ordini di uscita e inventario",
    version=config.SYSTEM_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# MIDDLEWARE
# =============================================================================

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"https?://.*",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ROUTERS
# =============================================================================

# Prefisso API
API_PREFIX = "/api/v1"

app.include_router(outbound.router, prefix=API_PREFIX, tags=["Ordini uscita"])
app.include_router(inventory.router, prefix=API_PREFIX, tags=["Inventario"])
app.include_router(system.router, prefix=API_PREFIX, tags=["Sistema"])


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Endpoint root - info applicazione."""
    return {
        "app": config.SYSTEM_NAME,
        "version": config.SYSTEM_VERSION,
        "status": "running",
        "docs": "/docs",
        "api": API_PREFIX
    }


@app.get("/health", tags=["Root"])
async def health_check():
    """Health check endpoint."""
    try:
        if check_connection():
            return {
                "status": "healthy",
                "database": "connected"
            }
        error = "SELECT 1 senza risultato"
    except Exception as e:
        error = str(e)
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "error": error}
    )


ERROR_PAGE_HTML = """<!DOCTYPE html>
<html lang="it">
<head><meta charset="utf-8"><title>{system_name} - Errore</title></head>
<body>
<h1>Si è verificato un errore</h1>
<p>L'operazione non è stata completata. L'errore è stato registrato.</p>
<p><a href="/">Torna alla home</a></p>
</body>
</html>
"""


@app.get(config.ERROR_PAGE, tags=["Root"], response_class=HTMLResponse)
async def error_page():
    """Pagina di errore per i client browser."""
    return ERROR_PAGE_HTML.format(system_name=config.SYSTEM_NAME)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handler globale per eccezioni non gestite.

    L'eccezione va nel log errori; i browser vengono rediretti alla pagina
    di errore, gli altri client ricevono l'envelope JSON.
    """
    # Il middleware ha già ripristinato il contextvar: il contesto è in request.state
    write_error_log(exc, context=getattr(request.state, "request_context", None))

    if "text/html" in request.headers.get("accept", ""):
        return RedirectResponse(url=config.ERROR_PAGE, status_code=303)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Errore interno del server"
        }
    )


# =============================================================================
# RUN (per sviluppo)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("wms.main:app", host="0.0.0.0", port=8000, reload=True)
