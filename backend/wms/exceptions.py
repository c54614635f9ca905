# =============================================================================
# GIGA WMS v1.0 - ECCEZIONI DI DOMINIO
# =============================================================================
# Errori previsti dei servizi. service_envelope li converte nell'envelope
# {success: false, message} e li registra come WARN con il loro codice.
# =============================================================================

from typing import Optional


class WmsException(Exception):
    """
    Errore di dominio con messaggio per l'utente.

    `code` identifica il tipo di errore nelle righe di log,
    `detail` è il messaggio restituito nell'envelope.
    """
    code: str = "WMS_ERROR"
    detail: str = "Operazione non consentita"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.__class__.detail
        super().__init__(self.detail)


class NotFoundError(WmsException):
    code = "NOT_FOUND"
    detail = "Risorsa non trovata"


class ValidationError(WmsException):
    code = "VALIDATION_ERROR"
    detail = "Dati non validi"


class ConflictError(WmsException):
    code = "CONFLICT"
    detail = "Operazione in conflitto con lo stato del documento"


# =============================================================================
# ORDINI DI USCITA
# =============================================================================

class OutboundOrderApprovedError(ConflictError):
    """Ordine di uscita già approvato: dettagli in sola lettura."""
    code = "OUTBOUND_ORDER_APPROVED"
    detail = "Ordine di uscita già approvato, impossibile modificare i dettagli"


class OutboundDetailNotFoundError(NotFoundError):
    code = "OUTBOUND_DETAIL_NOT_FOUND"
    detail = "Dettaglio da eliminare non trovato"


# =============================================================================
# INVENTARIO
# =============================================================================

class InsufficientStockError(ConflictError):
    """Scarico oltre la giacenza disponibile."""
    code = "INSUFFICIENT_STOCK"
    detail = "Giacenza insufficiente, impossibile scaricare"


class InventoryUpdateError(WmsException):
    """Esito inatteso di sp_inventory_update."""
    code = "INVENTORY_UPDATE_FAILED"
    detail = "Aggiornamento inventario fallito"
