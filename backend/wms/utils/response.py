# =============================================================================
# GIGA WMS v1.0 - UTILS/RESPONSE
# =============================================================================
# Builder per l'envelope {success, message, ...} restituito dai servizi
# =============================================================================

import copy
import functools
from typing import Any, Callable, Dict, List

from ..exceptions import WmsException
from ..log_helper import write_error_log, write_warn_log


def success_response(message: str, **fields) -> Dict[str, Any]:
    """
    Build standard success envelope.

    Args:
        message: Messaggio per l'utente
        **fields: Campi aggiuntivi (id, total, data, ...)
    """
    return {"success": True, "message": message, **fields}


def error_response(message: str, **fields) -> Dict[str, Any]:
    """Build standard failure envelope."""
    return {"success": False, "message": message, **fields}


def paginated_response(items: List[Any], total: int, message: str = "Query eseguita") -> Dict[str, Any]:
    """Envelope per liste paginate: totale record e righe della pagina."""
    return success_response(message, total=total, data=items)


def service_envelope(failure_prefix: str, module: str, **failure_fields) -> Callable:
    """
    Converte le eccezioni di un'operazione di servizio in envelope di errore.

    - WmsException: messaggio dell'eccezione, registrato come WARN
    - altre eccezioni: "<failure_prefix>: <errore>", registrate nel log errori

    Args:
        failure_prefix: Prefisso del messaggio per errori inattesi
        module: Modulo per il log
        **failure_fields: Campi dell'envelope di errore (es. total=0, data=[])
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except WmsException as e:
                write_warn_log(f"{func.__name__}: [{e.code}] {e.detail}", module)
                return error_response(e.detail, **copy.deepcopy(failure_fields))
            except Exception as e:
                write_error_log(e)
                return error_response(f"{failure_prefix}: {e}", **copy.deepcopy(failure_fields))
        return wrapper
    return decorator
