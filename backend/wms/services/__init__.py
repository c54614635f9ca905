# =============================================================================
# GIGA WMS v1.0 - SERVICES PACKAGE
# =============================================================================
# Export principali servizi
# =============================================================================

from .outbound import (
    save_outbound_order_detail,
    delete_outbound_order_detail,
    get_outbound_order_detail_list,
    update_inventory,
    insert_inventory_log,
    get_inventory_list,
)

from .sessions import SessionTracker, session_tracker


__all__ = [
    'save_outbound_order_detail',
    'delete_outbound_order_detail',
    'get_outbound_order_detail_list',
    'update_inventory',
    'insert_inventory_log',
    'get_inventory_list',
    'SessionTracker',
    'session_tracker',
]
