# =============================================================================
# GIGA WMS v1.0 - INVENTORY ROUTER
# =============================================================================
# Endpoint per giacenze e registro movimenti
# =============================================================================

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query

from ..config import config
from ..models import InventoryLogRequest, UpdateInventoryRequest
from ..services.outbound import get_inventory_list, insert_inventory_log, update_inventory


router = APIRouter(prefix="/inventory")


@router.get("")
async def lista_inventario(
    warehouse_id: int = Query(0, description="Filtra per magazzino (0 = tutti)"),
    product_id: int = Query(0, description="Filtra per prodotto (0 = tutti)"),
    shelf_id: int = Query(0, description="Filtra per scaffale (0 = tutti)"),
    batch_number: Optional[str] = Query(None, description="Filtra per lotto"),
    page_index: int = Query(1, description="Pagina, da 1"),
    page_size: int = Query(config.DEFAULT_PAGE_SIZE, le=500, description="Righe per pagina")
) -> Dict[str, Any]:
    """Lista paginata delle giacenze con filtri opzionali."""
    return get_inventory_list(
        warehouse_id=warehouse_id,
        product_id=product_id,
        shelf_id=shelf_id,
        batch_number=batch_number,
        page_index=page_index,
        page_size=page_size,
    )


@router.post("/adjust")
async def aggiorna_giacenza(request: UpdateInventoryRequest) -> Dict[str, Any]:
    """
    Variazione di giacenza su magazzino/scaffale/prodotto (lotto e scadenza opzionali).

    Uno scarico oltre la giacenza disponibile viene rifiutato.
    """
    return update_inventory(
        warehouse_id=request.warehouse_id,
        product_id=request.product_id,
        shelf_id=request.shelf_id,
        quantity=request.quantity,
        batch_number=request.batch_number,
        expiry_date=request.expiry_date,
    )


@router.post("/logs")
async def registra_movimento(request: InventoryLogRequest) -> Dict[str, Any]:
    """Registra un movimento di magazzino."""
    return insert_inventory_log(
        warehouse_id=request.warehouse_id,
        product_id=request.product_id,
        shelf_id=request.shelf_id,
        quantity=request.quantity,
        operation_type=request.operation_type,
        source_id=request.source_id,
        source_type=request.source_type,
        batch_number=request.batch_number,
        expiry_date=request.expiry_date,
        remark=request.remark,
    )
