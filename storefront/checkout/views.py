import dataclasses
from functools import partial
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.api.client import ApiClient
from storefront.api.errors import RateLimited
from storefront.auth.identity import Identity, resolve_identity
from storefront.cart.store import CartStore
from storefront.utils.dependencies import exclusive_action, get_api_client, get_cart, get_identity, get_navigator
from storefront.utils.navigation import RecordingNavigator
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import get_request_token

from .orchestrator import CheckoutOrchestrator, CheckoutState
from .verifier import ReturnFlowVerifier

# module storefront.checkout.views
api_router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])
web_router = APIRouter(prefix="/checkout", tags=["Checkout Web"])

PAYMENT_CANCELLED = "Payment was cancelled"


@api_router.post(
    "",
    dependencies=[
        Depends(optional_rate_limit(times=10, seconds=60)),
        Depends(exclusive_action("checkout", "Checkout already in progress")),
    ],
)
async def start_checkout(
    cart: CartStore = Depends(get_cart),
    identity: Optional[Identity] = Depends(get_identity),
    client: ApiClient = Depends(get_api_client),
    navigator: RecordingNavigator = Depends(get_navigator),
):
    """
    Lance le checkout du panier courant.
    - Refus local (400/401) si panier vide ou utilisateur non connecté, aucun appel réseau.
    - Succès: 303 vers la page de paiement du prestataire.
    - Échec (synchro utilisateur ou création de session): JSON {state, detail}, panier intact;
      429 + Retry-After si le backend a limité la création de session.
    """
    orchestrator = CheckoutOrchestrator(client, cart, navigator)
    state = await orchestrator.start(identity)
    if state is CheckoutState.REDIRECTING:
        redirect = navigator.redirect()
        if redirect is not None:
            return redirect
    if isinstance(orchestrator.error, RateLimited):
        headers = {"Retry-After": orchestrator.error.retry_after} if orchestrator.error.retry_after else None
        return JSONResponse(
            status_code=429, content={"state": state.value, "detail": orchestrator.reason}, headers=headers
        )
    return JSONResponse(status_code=400, content={"state": state.value, "detail": orchestrator.reason})


@web_router.get("/success")
async def checkout_success(
    request: Request,
    session_id: Optional[str] = None,
    cart: CartStore = Depends(get_cart),
    client: ApiClient = Depends(get_api_client),
    navigator: RecordingNavigator = Depends(get_navigator),
):
    """
    Retour du prestataire de paiement.
    - Succès: résultat (email, montant, devise, inscriptions), panier vidé.
    - Échec: erreur affichée puis redirection différée (en-tête Refresh) vers /checkout/cancel.
    - Non connecté (401 sans token): 303 vers la connexion, retour sur cette page.
    """
    verifier = ReturnFlowVerifier(client, cart, navigator)
    result = await verifier.run(session_id, partial(resolve_identity, get_request_token(request)))
    redirect = navigator.redirect()
    if redirect is not None:
        return redirect
    response = JSONResponse(content=dataclasses.asdict(result))
    return navigator.apply(response)


@web_router.get("/cancel")
def checkout_cancel(error: Optional[str] = None, cart: CartStore = Depends(get_cart)):
    """Paiement annulé ou échoué: le panier est conservé pour une nouvelle tentative."""
    return {"error": error or PAYMENT_CANCELLED, "cart_count": cart.count()}
