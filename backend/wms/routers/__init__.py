# =============================================================================
# GIGA WMS v1.0 - ROUTERS PACKAGE
# =============================================================================

from . import outbound
from . import inventory
from . import system

__all__ = [
    'outbound',
    'inventory',
    'system',
]
