# =============================================================================
# GIGA WMS v1.0 - INVENTORY
# =============================================================================
# Variazione giacenze, registro movimenti e lista paginata dell'inventario.
# Atomicità e controllo giacenza negativa sono in sp_inventory_update.
# =============================================================================

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from ...config import config
from ...database_pg import CommandType, OutputParam, execute_non_query, execute_pager
from ...exceptions import InsufficientStockError, InventoryUpdateError, ValidationError
from ...log_helper import write_operation_log
from ...utils.conversions import as_date, as_decimal, as_int, as_text
from ...utils.response import paginated_response, service_envelope, success_response
from .constants import (
    INVENTORY_UPDATE_INSUFFICIENT,
    INVENTORY_UPDATE_OK,
    MODULE_INVENTORY,
)


_INVENTORY_SOURCE = """
    inventory i
    INNER JOIN products p ON i.product_id = p.product_id
    INNER JOIN warehouses w ON i.warehouse_id = w.warehouse_id
    INNER JOIN shelves s ON i.shelf_id = s.shelf_id
"""

_INVENTORY_FIELDS = """
    i.inventory_id,
    i.warehouse_id,
    w.warehouse_name,
    i.product_id,
    p.product_name,
    p.product_code,
    i.shelf_id,
    s.shelf_name,
    i.quantity,
    i.batch_number,
    i.expiry_date
"""


def _map_inventory(row: Dict[str, Any]) -> Dict[str, Any]:
    """Riga DB -> record inventario."""
    return {
        "inventory_id": as_int(row["inventory_id"]),
        "warehouse_id": as_int(row["warehouse_id"]),
        "warehouse_name": as_text(row["warehouse_name"]),
        "product_id": as_int(row["product_id"]),
        "product_name": as_text(row["product_name"]),
        "product_code": as_text(row["product_code"]),
        "shelf_id": as_int(row["shelf_id"]),
        "shelf_name": as_text(row["shelf_name"]),
        "quantity": as_decimal(row["quantity"]),
        "batch_number": as_text(row["batch_number"]),
        "expiry_date": as_date(row["expiry_date"]),
    }


def _validate_location(warehouse_id: int, product_id: int, shelf_id: int) -> None:
    if warehouse_id <= 0:
        raise ValidationError("ID magazzino non valido")
    if product_id <= 0:
        raise ValidationError("ID prodotto non valido")
    if shelf_id <= 0:
        raise ValidationError("ID scaffale non valido")


# =============================================================================
# OPERAZIONI
# =============================================================================

@service_envelope("Aggiornamento inventario fallito", MODULE_INVENTORY)
def update_inventory(
    warehouse_id: int,
    product_id: int,
    shelf_id: int,
    quantity: Decimal,
    batch_number: Optional[str] = None,
    expiry_date: Optional[date] = None
) -> Dict[str, Any]:
    """
    Applica una variazione di giacenza.

    Args:
        quantity: Variazione con segno (positiva = carico, negativa = scarico)

    Returns:
        {success, message}
    """
    _validate_location(warehouse_id, product_id, shelf_id)

    result = OutputParam()
    execute_non_query(
        "sp_inventory_update",
        {
            "p_warehouse_id": warehouse_id,
            "p_product_id": product_id,
            "p_shelf_id": shelf_id,
            "p_quantity": quantity,
            "p_batch_number": batch_number,
            "p_expiry_date": expiry_date,
            "p_result": result,
        },
        CommandType.STORED_PROCEDURE
    )

    outcome = as_int(result.value)
    if outcome == INVENTORY_UPDATE_INSUFFICIENT:
        raise InsufficientStockError()
    if outcome != INVENTORY_UPDATE_OK:
        raise InventoryUpdateError()

    write_operation_log(
        "AGGIORNA_GIACENZA",
        f"magazzino {warehouse_id}, scaffale {shelf_id}, prodotto {product_id}, variazione {quantity}",
        MODULE_INVENTORY
    )
    return success_response("Inventario aggiornato")


@service_envelope("Registrazione movimento inventario fallita", MODULE_INVENTORY, inventory_log_id=0)
def insert_inventory_log(
    warehouse_id: int,
    product_id: int,
    shelf_id: int,
    quantity: Decimal,
    operation_type: int,
    source_id: int,
    source_type: int,
    batch_number: Optional[str] = None,
    expiry_date: Optional[date] = None,
    remark: Optional[str] = None
) -> Dict[str, Any]:
    """
    Registra un movimento di magazzino.

    Args:
        operation_type: OperationType (1 carico, 2 scarico, 3 rettifica)
        source_id: ID del documento di origine
        source_type: SourceType (1 ordine entrata, 2 ordine uscita, 3 inventario fisico)

    Returns:
        {success, message, inventory_log_id}
    """
    _validate_location(warehouse_id, product_id, shelf_id)

    inventory_log_id = OutputParam()
    execute_non_query(
        "sp_inventory_log_insert",
        {
            "p_warehouse_id": warehouse_id,
            "p_product_id": product_id,
            "p_shelf_id": shelf_id,
            "p_quantity": quantity,
            "p_operation_type": int(operation_type),
            "p_source_id": source_id,
            "p_source_type": int(source_type),
            "p_batch_number": batch_number,
            "p_expiry_date": expiry_date,
            "p_remark": remark,
            "p_inventory_log_id": inventory_log_id,
        },
        CommandType.STORED_PROCEDURE
    )
    log_id = as_int(inventory_log_id.value)

    write_operation_log(
        "MOVIMENTO_INVENTARIO",
        f"movimento {log_id}, tipo {int(operation_type)}, origine {int(source_type)}/{source_id}, quantità {quantity}",
        MODULE_INVENTORY
    )
    return success_response("Movimento inventario registrato", inventory_log_id=log_id)


@service_envelope("Lettura inventario fallita", MODULE_INVENTORY, total=0, data=[])
def get_inventory_list(
    warehouse_id: int = 0,
    product_id: int = 0,
    shelf_id: int = 0,
    batch_number: Optional[str] = None,
    page_index: int = 1,
    page_size: int = config.DEFAULT_PAGE_SIZE
) -> Dict[str, Any]:
    """
    Lista paginata delle giacenze con nomi di magazzino, prodotto e scaffale.

    I filtri si applicano solo se valorizzati (ID > 0, lotto non vuoto).

    Returns:
        {success, message, total, data}
    """
    conditions = []
    params = []

    if warehouse_id > 0:
        conditions.append("i.warehouse_id = %s")
        params.append(warehouse_id)

    if product_id > 0:
        conditions.append("i.product_id = %s")
        params.append(product_id)

    if shelf_id > 0:
        conditions.append("i.shelf_id = %s")
        params.append(shelf_id)

    if batch_number:
        conditions.append("i.batch_number = %s")
        params.append(batch_number)

    where_clause = " AND ".join(conditions) if conditions else "1=1"

    rows, total = execute_pager(
        _INVENTORY_SOURCE,
        _INVENTORY_FIELDS,
        where_clause,
        "i.inventory_id",
        page_size,
        page_index,
        tuple(params)
    )
    return paginated_response([_map_inventory(row) for row in rows], total)
