import logging
import uuid
from decimal import Decimal

from fastapi import APIRouter, HTTPException, status

from demo_service.schemas.item import ItemResponse

router = APIRouter()
logger = logging.getLogger(__name__)

_CATALOGUE = {
    item.id: item
    for item in (
        ItemResponse(
            id=uuid.UUID("6f1c2a9e-4b1d-4d59-9a57-0c1f3e2b7a10"),
            name="Widget",
            description="Standard size, blue",
            price=Decimal("3.50"),
            is_available=True,
        ),
        ItemResponse(
            id=uuid.UUID("0b7e5d43-2c8f-4e0a-8d6b-91a4f5c3e2d1"),
            name="Gadget",
            description="Battery not included",
            price=Decimal("17.00"),
            is_available=True,
        ),
        ItemResponse(
            id=uuid.UUID("c4d2e8f1-7a3b-4c6d-b5e9-2f8a1d0c3b47"),
            name="Sprocket",
            description=None,
            price=Decimal("0.75"),
            is_available=False,
        ),
    )
}


class ItemProcessingError(RuntimeError):
    pass


@router.get("", response_model=list[ItemResponse])
async def list_items() -> list[ItemResponse]:
    return list(_CATALOGUE.values())


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: uuid.UUID) -> ItemResponse:
    item = _CATALOGUE.get(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


@router.post("/{item_id}/fail")
async def fail_item(item_id: uuid.UUID) -> None:
    """Always raises; the unhandled error surfaces as a 500 in duration metrics."""
    logger.info("Received fail_item request", extra={"item_id": str(item_id)})
    raise ItemProcessingError(f"processing failed for item {item_id}")
