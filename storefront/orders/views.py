"""
Routes « Mes commandes ».
- La liste affichée est mémorisée dans le stockage du navigateur: l'annulation la réduit localement,
  la fermeture de la confirmation la recharge depuis le backend.
- Le message de confirmation vit dans la session de navigation.
"""
import json
import logging
from typing import Any, Dict, List, MutableMapping, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from storefront.api.client import ApiClient
from storefront.api.models import StudentOrder
from storefront.auth.identity import Identity
from storefront.cart.storage import KeyValueStorage
from storefront.utils.dependencies import exclusive_action, get_api_client, get_identity, get_storage
from storefront.utils.rate_limit import optional_rate_limit

from .service import CANCEL_IN_PROGRESS, OrderCancellationFlow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

ORDERS_STORAGE_KEY = "orders"
CONFIRMATION_SESSION_KEY = "order_confirmation"


def _load_orders(storage: KeyValueStorage) -> List[StudentOrder]:
    raw = storage.get(ORDERS_STORAGE_KEY)
    if not raw:
        return []
    try:
        return [StudentOrder.model_validate(row) for row in json.loads(raw)]
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning("orders.views cached orders unreadable, dropping: %s", e)
        storage.delete(ORDERS_STORAGE_KEY)
        return []


def _save_orders(storage: KeyValueStorage, orders: List[StudentOrder]) -> None:
    storage.set(ORDERS_STORAGE_KEY, json.dumps([o.model_dump(mode="json") for o in orders]))


def _payload(orders: List[StudentOrder], session: MutableMapping[str, Any]) -> Dict[str, Any]:
    return {
        "orders": [o.model_dump(mode="json") for o in orders],
        "confirmation": session.get(CONFIRMATION_SESSION_KEY),
    }


@router.get("")
async def list_orders(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    client: ApiClient = Depends(get_api_client),
    storage: KeyValueStorage = Depends(get_storage),
):
    flow = OrderCancellationFlow(client)
    orders = await flow.list_orders(identity)
    _save_orders(storage, orders)
    return _payload(orders, request.session)


@router.post(
    "/cancel",
    dependencies=[
        Depends(optional_rate_limit(times=10, seconds=60)),
        Depends(exclusive_action("cancel", CANCEL_IN_PROGRESS)),
    ],
)
async def cancel_order(
    order: StudentOrder,
    request: Request,
    client: ApiClient = Depends(get_api_client),
    storage: KeyValueStorage = Depends(get_storage),
):
    """
    Annule une commande (batch_num + dates requis, sinon 400 sans appel réseau).
    Retourne la liste affichée sans la commande annulée et le message de confirmation.
    """
    flow = OrderCancellationFlow(client)
    flow.orders = _load_orders(storage)
    confirmation = await flow.cancel(order)
    _save_orders(storage, flow.orders)
    request.session[CONFIRMATION_SESSION_KEY] = confirmation
    return _payload(flow.orders, request.session)


@router.post("/confirmation/dismiss")
async def dismiss_confirmation(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    client: ApiClient = Depends(get_api_client),
    storage: KeyValueStorage = Depends(get_storage),
):
    flow = OrderCancellationFlow(client)
    request.session.pop(CONFIRMATION_SESSION_KEY, None)
    orders = await flow.dismiss_confirmation(identity)
    _save_orders(storage, orders)
    return _payload(orders, request.session)
