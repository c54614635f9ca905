# =============================================================================
# GIGA WMS v1.0 - TEST FACTORIES
# =============================================================================
# Factory Boy factories per generazione dati di test
# =============================================================================

from .outbound import OutboundDetailRowFactory, InventoryRowFactory

__all__ = [
    "OutboundDetailRowFactory",
    "InventoryRowFactory",
]
