# =============================================================================
# GIGA WMS v1.0 - OUTBOUND SERVICE PACKAGE
# =============================================================================
# Servizio ordini di uscita decomposto in moduli:
#   outbound/details.py    - Dettagli ordine di uscita (save, delete, lista)
#   outbound/inventory.py  - Giacenze e registro movimenti
#   outbound/constants.py  - Tipi movimento, origini, codici procedura
# =============================================================================

from .constants import OperationType, SourceType

from .details import (
    save_outbound_order_detail,
    delete_outbound_order_detail,
    get_outbound_order_detail_list,
    get_outbound_order_id_by_detail_id,
    is_outbound_order_approved,
)

from .inventory import (
    update_inventory,
    insert_inventory_log,
    get_inventory_list,
)


__all__ = [
    'OperationType',
    'SourceType',
    # Dettagli
    'save_outbound_order_detail',
    'delete_outbound_order_detail',
    'get_outbound_order_detail_list',
    'get_outbound_order_id_by_detail_id',
    'is_outbound_order_approved',
    # Inventario
    'update_inventory',
    'insert_inventory_log',
    'get_inventory_list',
]
