import uuid
from decimal import Decimal

from pydantic import BaseModel


class ItemResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    price: Decimal
    is_available: bool
