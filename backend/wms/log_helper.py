# =============================================================================
# GIGA WMS v1.0 - LOG HELPER
# =============================================================================
# Log applicativo su file giornalieri:
#   <LOG_PATH>/<yyyy-MM-dd>.log        - operazioni, debug, warning
#   <LOG_PATH>/<yyyy-MM-dd>_error.log  - eccezioni con stack trace
#
# Ogni tipo di log è abilitato da un flag in configurazione
# (ENABLE_DEBUG_LOG, ENABLE_ERROR_LOG, ENABLE_OPERATION_LOG).
# =============================================================================

import logging
import os
import threading
import traceback
from datetime import datetime
from typing import Optional

from .config import config
from .context import RequestContext, get_request_context


LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

OPERATION_LOGGER = "wms.operation"
ERROR_LOGGER = "wms.error"

_LINE_FORMAT = "[%(asctime)s] [%(log_type)s] [%(wms_module)s] %(message)s%(request_suffix)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_SEPARATOR = "-" * 40

_configured_path: Optional[str] = None
_configure_lock = threading.Lock()


# =============================================================================
# HANDLER E FILTRI
# =============================================================================

class DailyFileHandler(logging.FileHandler):
    """
    FileHandler che scrive su `<directory>/<yyyy-MM-dd><suffix>.log`.

    Il file viene scelto al momento della scrittura in base alla data del
    record, quindi a mezzanotte si passa al file del nuovo giorno.
    La directory viene creata se manca.
    """

    def __init__(self, directory: str, suffix: str = "", encoding: str = "utf-8"):
        self.directory = directory
        self.suffix = suffix
        super().__init__(self.path_for(datetime.now()), mode="a", encoding=encoding, delay=True)

    def path_for(self, moment: datetime) -> str:
        return os.path.abspath(
            os.path.join(self.directory, f"{moment:%Y-%m-%d}{self.suffix}.log")
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            path = self.path_for(datetime.fromtimestamp(record.created))
            if path != self.baseFilename:
                if self.stream is not None:
                    self.stream.close()
                    self.stream = None
                self.baseFilename = path
            os.makedirs(self.directory, exist_ok=True)
            super().emit(record)
        except Exception:
            self.handleError(record)


class RequestContextFilter(logging.Filter):
    """Aggiunge ` [User: ...] [IP: ...]` quando c'è una richiesta in corso."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_request_context()
        suffix = ""
        if context is not None:
            if context.username:
                suffix += f" [User: {context.username}]"
            if context.ip:
                suffix += f" [IP: {context.ip}]"
        record.request_suffix = suffix
        if not hasattr(record, "log_type"):
            record.log_type = record.levelname
        if not hasattr(record, "wms_module"):
            record.wms_module = record.name
        return True


def _install_handler(logger: logging.Logger, handler: logging.Handler, fmt: str) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    handler.setFormatter(logging.Formatter(fmt, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False


def configure_logging(log_path: Optional[str] = None) -> None:
    """
    Collega i logger `wms.operation` e `wms.error` ai file giornalieri.

    Idempotente per lo stesso percorso; un percorso diverso sostituisce
    gli handler esistenti.
    """
    global _configured_path
    path = log_path or config.LOG_PATH

    with _configure_lock:
        if _configured_path == path:
            return

        operation_handler = DailyFileHandler(path)
        operation_handler.addFilter(RequestContextFilter())
        _install_handler(logging.getLogger(OPERATION_LOGGER), operation_handler, _LINE_FORMAT)

        _install_handler(
            logging.getLogger(ERROR_LOGGER),
            DailyFileHandler(path, suffix="_error"),
            "%(message)s"
        )
        _configured_path = path


def _ensure_configured() -> None:
    if _configured_path is None:
        configure_logging()


# =============================================================================
# SCRITTURA LOG
# =============================================================================

def write_log(message: str, module: str, log_type: str) -> None:
    """
    Scrive una riga nel log del giorno.

    Args:
        message: Messaggio
        module: Nome modulo (es. "Inventario")
        log_type: INFO, DEBUG, ERROR o WARN
    """
    log_type = (log_type or "INFO").upper()

    if log_type == "DEBUG" and not config.ENABLE_DEBUG_LOG:
        return
    if log_type == "ERROR" and not config.ENABLE_ERROR_LOG:
        return
    if log_type in ("INFO", "WARN") and not config.ENABLE_OPERATION_LOG:
        return

    _ensure_configured()
    logging.getLogger(OPERATION_LOGGER).log(
        LOG_LEVELS.get(log_type, logging.INFO),
        message,
        extra={"wms_module": module, "log_type": log_type},
    )


def _format_traceback(exc: BaseException) -> str:
    return "".join(traceback.format_tb(exc.__traceback__)).rstrip()


def write_error_log(exc: BaseException, context: Optional[RequestContext] = None) -> None:
    """
    Scrive un blocco di errore nel file `_error.log` del giorno.

    Include tipo, stack trace, eccezione interna (cause/context) e, se
    disponibili, i dati della richiesta e l'utente corrente.

    Args:
        exc: Eccezione da registrare
        context: Contesto richiesta esplicito (default: quello corrente)
    """
    if not config.ENABLE_ERROR_LOG:
        return

    _ensure_configured()
    context = context or get_request_context()
    exc_type = type(exc)

    lines = [
        f"[{datetime.now():%Y-%m-%d %H:%M:%S}] [ERROR] Messaggio eccezione: {exc}",
        f"Tipo eccezione: {exc_type.__module__}.{exc_type.__qualname__}",
        f"Stack trace: {_format_traceback(exc)}",
    ]

    inner = exc.__cause__ or exc.__context__
    if inner is not None:
        lines.append(f"Eccezione interna: {inner}")
        lines.append(f"Stack trace interno: {_format_traceback(inner)}")

    if context is not None:
        if context.url:
            lines.append(f"URL richiesta: {context.url}")
            lines.append(f"Metodo richiesta: {context.method}")
            lines.append(f"IP client: {context.ip}")
            lines.append(f"User agent: {context.user_agent}")
        if context.username:
            lines.append(f"Utente corrente: {context.username}")

    lines.append(_SEPARATOR)
    logging.getLogger(ERROR_LOGGER).error("\n".join(lines) + "\n")


def write_debug_log(message: str, module: str) -> None:
    write_log(message, module, "DEBUG")


def write_info_log(message: str, module: str) -> None:
    write_log(message, module, "INFO")


def write_warn_log(message: str, module: str) -> None:
    write_log(message, module, "WARN")


def write_operation_log(operation_type: str, operation_content: str, module: str) -> None:
    """Registra un'operazione utente (riga INFO)."""
    message = f"Tipo operazione: {operation_type}, contenuto: {operation_content}"
    write_log(message, module, "INFO")
