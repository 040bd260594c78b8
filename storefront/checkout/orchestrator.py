# module storefront.checkout.orchestrator
"""
Orchestrateur du checkout (machine à états).

IDLE -> SYNCING_USER -> CREATING_SESSION -> REDIRECTING, FAILED atteignable depuis chaque étape.
- Démarrage refusé (PreconditionFailed, état inchangé) si panier vide, utilisateur non connecté
  ou checkout déjà en cours.
- Échec de la synchro utilisateur: FAILED, panier intact (aucun effet à annuler).
- Échec de création de session: FAILED avec le message de l'erreur (le message 429 contient
  déjà le délai d'attente).
- Succès: REDIRECTING et navigation immédiate vers l'URL du prestataire de paiement.
Pas de retry automatique: l'utilisateur relance depuis FAILED.
"""
import enum
import logging
from typing import Optional

from storefront.api.client import ApiClient
from storefront.api.errors import ApiError
from storefront.auth.identity import Identity
from storefront.cart.store import CartStore
from storefront.errors import PreconditionFailed
from storefront.utils.navigation import Navigator

from . import session as checkout_session
from . import user_sync

logger = logging.getLogger(__name__)

USER_SYNC_FAILED = "We could not verify your account. Please try again."
SESSION_FAILED = "Failed to create checkout session"


class CheckoutState(str, enum.Enum):
    IDLE = "idle"
    SYNCING_USER = "syncing_user"
    CREATING_SESSION = "creating_session"
    REDIRECTING = "redirecting"
    FAILED = "failed"


IN_PROGRESS_STATES = {CheckoutState.SYNCING_USER, CheckoutState.CREATING_SESSION, CheckoutState.REDIRECTING}


class CheckoutOrchestrator:
    def __init__(self, client: ApiClient, cart: CartStore, navigator: Navigator):
        self.client = client
        self.cart = cart
        self.navigator = navigator
        self.state = CheckoutState.IDLE
        self.reason: Optional[str] = None
        self.redirect_url: Optional[str] = None
        self.error: Optional[ApiError] = None

    def can_checkout(self, identity: Optional[Identity]) -> bool:
        """Action disponible: panier non vide et utilisateur connecté."""
        return not self.cart.is_empty() and identity is not None and self.state not in IN_PROGRESS_STATES

    def _fail(self, reason: str) -> CheckoutState:
        self.state = CheckoutState.FAILED
        self.reason = reason
        logger.info("checkout.orchestrator failed reason=%s", reason)
        return self.state

    async def start(self, identity: Optional[Identity]) -> CheckoutState:
        if self.state in IN_PROGRESS_STATES:
            raise PreconditionFailed("Checkout already in progress")
        if self.cart.is_empty():
            raise PreconditionFailed("Your cart is empty")
        if identity is None:
            raise PreconditionFailed("Please sign in to checkout", status_code=401)

        self.reason = None
        self.error = None
        self.redirect_url = None

        self.state = CheckoutState.SYNCING_USER
        try:
            synced = await user_sync.ensure_user(self.client, full_name=identity.full_name, phone=identity.phone)
        except Exception:
            logger.exception("checkout.orchestrator user sync raised")
            synced = False
        if not synced:
            return self._fail(USER_SYNC_FAILED)

        self.state = CheckoutState.CREATING_SESSION
        items = checkout_session.to_checkout_items(self.cart.list(), identity.email)
        try:
            result = await checkout_session.create_session(self.client, items)
        except ApiError as e:
            self.error = e
            return self._fail(e.message or SESSION_FAILED)

        self.state = CheckoutState.REDIRECTING
        self.redirect_url = result.url
        self.navigator.navigate(result.url)
        logger.info("checkout.orchestrator redirecting items=%s", len(items))
        return self.state
