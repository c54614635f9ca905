# =============================================================================
# GIGA WMS v1.0 - MODELLI API
# =============================================================================
# Modelli Pydantic per i body delle richieste.
# La validazione di dominio (ID > 0, quantità > 0, ordine approvato) resta
# nei servizi, che rispondono con l'envelope {success, message}.
# =============================================================================

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .services.outbound import OperationType, SourceType


class SaveOutboundDetailRequest(BaseModel):
    """Body per POST /outbound/details (id 0 = nuovo dettaglio)."""
    outbound_order_detail_id: int = Field(0, description="0 per inserimento")
    outbound_order_id: int
    product_id: int
    quantity: Decimal
    unit_price: Decimal = Decimal("0")
    batch_number: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[date] = None
    remark: Optional[str] = Field(None, max_length=500)


class UpdateInventoryRequest(BaseModel):
    """Body per POST /inventory/adjust. quantity > 0 carico, < 0 scarico."""
    warehouse_id: int
    product_id: int
    shelf_id: int
    quantity: Decimal
    batch_number: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[date] = None


class InventoryLogRequest(BaseModel):
    """Body per POST /inventory/logs."""
    warehouse_id: int
    product_id: int
    shelf_id: int
    quantity: Decimal
    operation_type: OperationType
    source_id: int = 0
    source_type: SourceType
    batch_number: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[date] = None
    remark: Optional[str] = Field(None, max_length=500)
