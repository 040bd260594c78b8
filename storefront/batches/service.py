"""
Catalogue des batches (lecture seule, source: backend).
- batches_for_class_type: batches d'un niveau triés par date de début.
- next_available_batch: premier batch ouvert (actif, non plein, places restantes) à partir d'une date.
- cart_item_from_batch: ligne de panier pour un plan tarifaire appliqué à un batch.
"""
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.api.models import Batch
from storefront.cart.models import CartItem, make_item_id


async def list_batches(client: ApiClient, class_type: Optional[str] = None) -> List[Batch]:
    batches = await endpoints.get_batches(client)
    if class_type:
        return batches_for_class_type(batches, class_type)
    return sorted(batches, key=lambda b: (b.class_type, b.start_date))


def batches_for_class_type(batches: Iterable[Batch], class_type: str) -> List[Batch]:
    return sorted((b for b in batches if b.class_type == class_type), key=lambda b: b.start_date)


def next_available_batch(batches: Iterable[Batch], class_type: str, after: Optional[str] = None) -> Optional[Batch]:
    """Dates ISO (YYYY-MM-DD...) comparées lexicographiquement."""
    for batch in batches_for_class_type(batches, class_type):
        if after and batch.start_date <= after:
            continue
        if batch.available:
            return batch
    return None


def cart_item_from_batch(
    plan_name: str,
    price: Union[Decimal, int, float, str],
    batch: Batch,
    description: str = "",
    features: Optional[List[str]] = None,
) -> CartItem:
    return CartItem(
        id=make_item_id(plan_name, batch.batch_num),
        name=plan_name,
        price=Decimal(str(price)),
        description=description or (batch.description or ""),
        features=list(features or []),
        start_date=batch.start_date,
        end_date=batch.end_date,
        batch_number=batch.batch_num,
    )
