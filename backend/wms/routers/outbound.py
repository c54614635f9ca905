# =============================================================================
# GIGA WMS v1.0 - OUTBOUND ROUTER
# =============================================================================
# Endpoint per i dettagli degli ordini di uscita
# =============================================================================

from typing import Any, Dict

from fastapi import APIRouter, Query

from ..config import config
from ..models import SaveOutboundDetailRequest
from ..services.outbound import (
    delete_outbound_order_detail,
    get_outbound_order_detail_list,
    save_outbound_order_detail,
)


router = APIRouter(prefix="/outbound")


@router.post("/details")
async def salva_dettaglio(request: SaveOutboundDetailRequest) -> Dict[str, Any]:
    """
    Inserisce o aggiorna un dettaglio ordine di uscita.

    outbound_order_detail_id = 0 crea un nuovo dettaglio.
    Ordini approvati non sono modificabili.
    """
    return save_outbound_order_detail(
        outbound_order_detail_id=request.outbound_order_detail_id,
        outbound_order_id=request.outbound_order_id,
        product_id=request.product_id,
        quantity=request.quantity,
        unit_price=request.unit_price,
        batch_number=request.batch_number,
        expiry_date=request.expiry_date,
        remark=request.remark,
    )


@router.delete("/details/{detail_id}")
async def elimina_dettaglio(detail_id: int) -> Dict[str, Any]:
    """Elimina un dettaglio (solo se l'ordine non è approvato)."""
    return delete_outbound_order_detail(detail_id)


@router.get("/{order_id}/details")
async def lista_dettagli(
    order_id: int,
    page_index: int = Query(1, description="Pagina, da 1"),
    page_size: int = Query(config.DEFAULT_PAGE_SIZE, le=500, description="Righe per pagina")
) -> Dict[str, Any]:
    """Lista paginata dei dettagli di un ordine di uscita."""
    return get_outbound_order_detail_list(order_id, page_index, page_size)
