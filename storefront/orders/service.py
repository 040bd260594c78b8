"""Couche service de l'user story « Mes commandes / annulation ».
Rôles:
- Lister les commandes de l'utilisateur connecté (email requis, sinon erreur affichée).
- Annuler une commande: garde locale (batch + dates) avant tout appel réseau,
  une seule annulation à la fois.
- Après succès: retrait optimiste de la commande (apply_local_cancellation);
  la fermeture de la confirmation déclenche un rechargement complet (refetch_orders).
"""
import logging
from typing import List, Optional, Tuple

from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.api.models import StudentOrder
from storefront.auth.identity import Identity
from storefront.errors import PreconditionFailed

logger = logging.getLogger(__name__)

EMAIL_NOT_FOUND = "Email address not found"
MISSING_BATCH = "This order cannot be cancelled: batch number is missing"
MISSING_DATES = "This order cannot be cancelled: start and end dates are required"
CANCEL_IN_PROGRESS = "A cancellation is already in progress"
DEFAULT_CONFIRMATION = "Your cancellation request has been received"

def normalize_date(value: Optional[str]) -> str:
    """'2025-03-01T10:00:00Z' -> '2025-03-01'; None/'' -> ''."""
    raw = (value or "").strip()
    for sep in ("T", " "):
        if sep in raw:
            raw = raw.split(sep, 1)[0]
    return raw

def order_key(order: StudentOrder) -> Tuple[Optional[int], str, str]:
    return (order.batch_num, normalize_date(order.start_date), normalize_date(order.end_date))

def apply_local_cancellation(orders: List[StudentOrder], cancelled: StudentOrder) -> List[StudentOrder]:
    """Transformation pure: retire la commande annulée de la liste affichée."""
    key = order_key(cancelled)
    return [o for o in orders if order_key(o) != key]

class OrderCancellationFlow:
    def __init__(self, client: ApiClient):
        self.client = client
        self.orders: List[StudentOrder] = []
        self.pending = False
        self.confirmation: Optional[str] = None

    async def list_orders(self, identity: Optional[Identity]) -> List[StudentOrder]:
        if identity is None or not identity.email:
            raise PreconditionFailed(EMAIL_NOT_FOUND)
        self.orders = await endpoints.get_student_orders(self.client, identity.email)
        return self.orders

    async def refetch_orders(self, identity: Optional[Identity]) -> List[StudentOrder]:
        return await self.list_orders(identity)

    async def dismiss_confirmation(self, identity: Optional[Identity]) -> List[StudentOrder]:
        """Fermeture de la confirmation: resynchronise avec l'état serveur."""
        self.confirmation = None
        return await self.refetch_orders(identity)

    async def cancel(self, order: StudentOrder) -> str:
        """
        Annule `order` côté backend.
        - PreconditionFailed (aucun appel) si batch_num absent, dates vides après normalisation,
          ou annulation déjà en cours.
        - Succès: retrait optimiste de la liste et message de confirmation.
        """
        if self.pending:
            raise PreconditionFailed(CANCEL_IN_PROGRESS, status_code=409)
        if order.batch_num is None:
            raise PreconditionFailed(MISSING_BATCH)
        start_date = normalize_date(order.start_date)
        end_date = normalize_date(order.end_date)
        if not start_date or not end_date:
            raise PreconditionFailed(MISSING_DATES)

        self.pending = True
        try:
            res = await endpoints.cancel_order(self.client, order.batch_num, start_date, end_date)
        finally:
            self.pending = False

        self.orders = apply_local_cancellation(self.orders, order)
        self.confirmation = res.message or DEFAULT_CONFIRMATION
        logger.info("orders.service cancel ok batch_num=%s", order.batch_num)
        return self.confirmation
