# module storefront.checkout.session
"""
Étape « session de paiement »: projette le panier en CheckoutItem et demande l'URL
de la page de paiement hébergée. Aucune validation de prix locale: le backend
est seul maître des prix et de la session chez le prestataire de paiement.
"""
from typing import Iterable, List, Optional

from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.api.models import CheckoutItem, CheckoutSession
from storefront.cart.models import CartItem


def to_checkout_items(cart_items: Iterable[CartItem], email: Optional[str]) -> List[CheckoutItem]:
    return [
        CheckoutItem(
            name=item.name,
            email=email,
            start_date=item.start_date,
            end_date=item.end_date,
            batch_number=item.batch_number,
        )
        for item in cart_items
    ]


async def create_session(client: ApiClient, items: List[CheckoutItem]) -> CheckoutSession:
    """Retourne {url} opaque; l'appelant doit naviguer dessus (navigation complète)."""
    return await endpoints.create_checkout_session(client, items)
