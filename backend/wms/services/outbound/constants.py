# =============================================================================
# GIGA WMS v1.0 - OUTBOUND/INVENTORY CONSTANTS
# =============================================================================

from enum import IntEnum


MODULE_OUTBOUND = "Ordini uscita"
MODULE_INVENTORY = "Inventario"


class OperationType(IntEnum):
    """Tipo movimento di magazzino registrato in inventory_logs."""
    INBOUND = 1      # carico
    OUTBOUND = 2     # scarico
    ADJUSTMENT = 3   # rettifica


class SourceType(IntEnum):
    """Documento che ha originato il movimento."""
    INBOUND_ORDER = 1
    OUTBOUND_ORDER = 2
    STOCKTAKE = 3


# Valori di ritorno di sp_inventory_update (p_result)
INVENTORY_UPDATE_OK = 1
INVENTORY_UPDATE_INSUFFICIENT = -1
