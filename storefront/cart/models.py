"""
Ligne de panier (CartItem) et composition de son identifiant.
"""
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_serializer

BatchNumber = Union[int, str]


def make_item_id(plan_name: str, batch_number: Optional[BatchNumber] = None) -> str:
    """
    Identifiant stable d'une sélection: "<plan>-batch-<n>".
    Deux achats du même plan sur des batches différents restent deux lignes distinctes.
    """
    base = (plan_name or "").strip().lower()
    if batch_number is None or batch_number == "":
        return base
    return f"{base}-batch-{batch_number}"


class CartItem(BaseModel):
    id: str = Field(min_length=1)
    name: str
    price: Decimal
    description: str = ""
    features: List[str] = Field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    batch_number: Optional[BatchNumber] = None

    @field_serializer("price")
    def _serialize_price(self, price: Decimal) -> Union[int, float]:
        # JSON: nombre natif comme côté navigateur
        return int(price) if price == price.to_integral_value() else float(price)
