# =============================================================================
# GIGA WMS v1.0 - OUTBOUND ORDER DETAILS
# =============================================================================
# Salvataggio, eliminazione e lista paginata delle righe degli ordini di uscita.
# I vincoli sul documento (ordine approvato non modificabile) sono verificati
# qui e ripetuti in sp_outbound_order_details_save.
# =============================================================================

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from ...config import OUTBOUND_STATUS_APPROVED, config
from ...database_pg import (
    CommandType,
    OutputParam,
    execute_non_query,
    execute_pager,
    execute_scalar,
)
from ...exceptions import (
    OutboundDetailNotFoundError,
    OutboundOrderApprovedError,
    ValidationError,
)
from ...log_helper import write_operation_log
from ...utils.conversions import as_date, as_decimal, as_int, as_text
from ...utils.response import paginated_response, service_envelope, success_response
from .constants import MODULE_OUTBOUND


_DETAIL_SOURCE = """
    outbound_order_details d
    INNER JOIN products p ON d.product_id = p.product_id
"""

_DETAIL_FIELDS = """
    d.outbound_order_detail_id,
    d.outbound_order_id,
    d.product_id,
    p.product_name,
    p.product_code,
    d.quantity,
    d.unit_price,
    d.batch_number,
    d.expiry_date,
    d.remark
"""


def _map_detail(row: Dict[str, Any]) -> Dict[str, Any]:
    """Riga DB -> record dettaglio."""
    return {
        "outbound_order_detail_id": as_int(row["outbound_order_detail_id"]),
        "outbound_order_id": as_int(row["outbound_order_id"]),
        "product_id": as_int(row["product_id"]),
        "product_name": as_text(row["product_name"]),
        "product_code": as_text(row["product_code"]),
        "quantity": as_decimal(row["quantity"]),
        "unit_price": as_decimal(row["unit_price"]),
        "batch_number": as_text(row["batch_number"]),
        "expiry_date": as_date(row["expiry_date"]),
        "remark": as_text(row["remark"]),
    }


# =============================================================================
# HELPER
# =============================================================================

def get_outbound_order_id_by_detail_id(outbound_order_detail_id: int) -> int:
    """ID dell'ordine che contiene il dettaglio, 0 se il dettaglio non esiste."""
    value = execute_scalar(
        "SELECT outbound_order_id FROM outbound_order_details WHERE outbound_order_detail_id = %s",
        (outbound_order_detail_id,)
    )
    return as_int(value)


def is_outbound_order_approved(outbound_order_id: int) -> bool:
    """True se l'ordine è in stato approvato. Ordine mancante o senza stato: False."""
    status = execute_scalar(
        "SELECT status FROM outbound_orders WHERE outbound_order_id = %s",
        (outbound_order_id,)
    )
    if status is None:
        return False
    return as_int(status) == OUTBOUND_STATUS_APPROVED


# =============================================================================
# OPERAZIONI
# =============================================================================

@service_envelope(
    "Salvataggio dettaglio ordine di uscita fallito",
    MODULE_OUTBOUND,
    outbound_order_detail_id=0
)
def save_outbound_order_detail(
    outbound_order_detail_id: int,
    outbound_order_id: int,
    product_id: int,
    quantity: Decimal,
    unit_price: Decimal,
    batch_number: Optional[str] = None,
    expiry_date: Optional[date] = None,
    remark: Optional[str] = None
) -> Dict[str, Any]:
    """
    Inserisce (id 0) o aggiorna un dettaglio ordine di uscita.

    Args:
        outbound_order_detail_id: ID dettaglio, 0 per un nuovo dettaglio
        outbound_order_id: ID ordine di uscita
        product_id: ID prodotto
        quantity: Quantità (> 0)
        unit_price: Prezzo unitario
        batch_number: Lotto (opzionale)
        expiry_date: Scadenza (opzionale)
        remark: Note (opzionale)

    Returns:
        {success, message, outbound_order_detail_id}
    """
    if outbound_order_id <= 0:
        raise ValidationError("ID ordine di uscita non valido")
    if product_id <= 0:
        raise ValidationError("ID prodotto non valido")
    if quantity <= 0:
        raise ValidationError("La quantità deve essere maggiore di 0")

    # Un dettaglio esistente resta nel suo ordine
    if outbound_order_detail_id > 0:
        current_order_id = get_outbound_order_id_by_detail_id(outbound_order_detail_id)
        if current_order_id <= 0:
            raise OutboundDetailNotFoundError("Dettaglio da modificare non trovato")
        if current_order_id != outbound_order_id:
            raise ValidationError("Il dettaglio non appartiene all'ordine di uscita indicato")

    if is_outbound_order_approved(outbound_order_id):
        raise OutboundOrderApprovedError()

    new_detail_id = OutputParam()
    execute_non_query(
        "sp_outbound_order_details_save",
        {
            "p_outbound_order_detail_id": outbound_order_detail_id,
            "p_outbound_order_id": outbound_order_id,
            "p_product_id": product_id,
            "p_quantity": quantity,
            "p_unit_price": unit_price,
            "p_batch_number": batch_number,
            "p_expiry_date": expiry_date,
            "p_remark": remark,
            "p_new_outbound_order_detail_id": new_detail_id,
        },
        CommandType.STORED_PROCEDURE
    )
    detail_id = as_int(new_detail_id.value)

    write_operation_log(
        "SALVA_DETTAGLIO_USCITA",
        f"ordine {outbound_order_id}, dettaglio {detail_id}, prodotto {product_id}, quantità {quantity}",
        MODULE_OUTBOUND
    )
    return success_response("Dettaglio ordine di uscita salvato", outbound_order_detail_id=detail_id)


@service_envelope("Eliminazione dettaglio ordine di uscita fallita", MODULE_OUTBOUND)
def delete_outbound_order_detail(outbound_order_detail_id: int) -> Dict[str, Any]:
    """
    Elimina un dettaglio se l'ordine non è approvato.

    Returns:
        {success, message}
    """
    if outbound_order_detail_id <= 0:
        raise ValidationError("ID dettaglio ordine di uscita non valido")

    outbound_order_id = get_outbound_order_id_by_detail_id(outbound_order_detail_id)
    if outbound_order_id <= 0:
        raise OutboundDetailNotFoundError()

    if is_outbound_order_approved(outbound_order_id):
        raise OutboundOrderApprovedError("Ordine di uscita già approvato, impossibile eliminare i dettagli")

    deleted = execute_non_query(
        "DELETE FROM outbound_order_details WHERE outbound_order_detail_id = %s",
        (outbound_order_detail_id,)
    )
    if deleted <= 0:
        raise OutboundDetailNotFoundError()

    write_operation_log(
        "ELIMINA_DETTAGLIO_USCITA",
        f"ordine {outbound_order_id}, dettaglio {outbound_order_detail_id}",
        MODULE_OUTBOUND
    )
    return success_response("Dettaglio eliminato")


@service_envelope("Lettura dettagli ordine di uscita fallita", MODULE_OUTBOUND, total=0, data=[])
def get_outbound_order_detail_list(
    outbound_order_id: int,
    page_index: int = 1,
    page_size: int = config.DEFAULT_PAGE_SIZE
) -> Dict[str, Any]:
    """
    Lista paginata dei dettagli di un ordine, con nome e codice prodotto.

    Returns:
        {success, message, total, data}
    """
    if outbound_order_id <= 0:
        raise ValidationError("ID ordine di uscita non valido")

    rows, total = execute_pager(
        _DETAIL_SOURCE,
        _DETAIL_FIELDS,
        "d.outbound_order_id = %s",
        "d.outbound_order_detail_id",
        page_size,
        page_index,
        (outbound_order_id,)
    )
    return paginated_response([_map_detail(row) for row in rows], total)
