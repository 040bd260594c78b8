# module storefront.checkout.verifier
"""
Vérification au retour du prestataire de paiement (page succès avec ?session_id=).

Garde explicite NOT_STARTED -> IN_PROGRESS -> DONE: le flux ne s'exécute qu'une fois
par instance, un second appel renvoie le résultat du premier sans appel réseau.

Étapes:
1) session_id absent => échec "No session ID provided"
2) attente de l'identité (chargement asynchrone du fournisseur d'identité)
3) verify_session: valide seulement si valid ET paid
4) invalide/erreur => navigation différée (3s) vers la page d'échec avec ?error=,
   sauf 401 sans token: la navigation immédiate vers la connexion est conservée
5) update_purchase(session_id): achat pending -> finalisé
6) email / nom complet: identité d'abord, réponse de vérification ensuite
7) inscription par ligne du panier ayant un batch (ou ligne synthétique si panier vide),
   séquentielle, « best-effort »: un échec est journalisé et n'arrête pas les suivantes
8) panier vidé, succès affiché (email, montant, devise)
Sémantique « au moins une fois »: le backend doit dédoublonner les inscriptions répétées.
"""
import enum
import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Union

from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.api.errors import Unauthorized
from storefront.api.models import BatchNumber, RegisterStudentRequest, VerifySessionResponse
from storefront.auth.identity import Identity
from storefront.cart.models import CartItem
from storefront.cart.store import CartStore
from storefront.config import CHECKOUT_CANCEL_PATH, FAILURE_REDIRECT_DELAY_SECONDS
from storefront.errors import PreconditionFailed, StorefrontError
from storefront.utils.navigation import Navigator

logger = logging.getLogger(__name__)

NO_SESSION_ID = "No session ID provided"
VERIFICATION_FAILED = "Payment verification failed"
MISSING_IDENTITY = "Unable to register: student email or full name not found"

IdentityLoader = Callable[[], Awaitable[Optional[Identity]]]


class FlowGuard(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass
class Registration:
    batch_number: BatchNumber
    ok: bool
    message: Optional[str] = None
    warning: Optional[str] = None


@dataclass
class ReturnFlowResult:
    valid: bool = False
    error: Optional[str] = None
    session_id: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[Union[int, float]] = None
    currency: Optional[str] = None
    registrations: List[Registration] = field(default_factory=list)
    redirect_url: Optional[str] = None
    redirect_delay: float = 0.0


def failure_url(error: str) -> str:
    return f"{CHECKOUT_CANCEL_PATH}?error={urllib.parse.quote(error, safe='')}"


class ReturnFlowVerifier:
    def __init__(
        self,
        client: ApiClient,
        cart: CartStore,
        navigator: Navigator,
        redirect_delay: float = FAILURE_REDIRECT_DELAY_SECONDS,
    ):
        self.client = client
        self.cart = cart
        self.navigator = navigator
        self.redirect_delay = redirect_delay
        self.guard = FlowGuard.NOT_STARTED
        self.result: Optional[ReturnFlowResult] = None

    async def run(self, session_id: Optional[str], load_identity: IdentityLoader) -> ReturnFlowResult:
        if self.guard is not FlowGuard.NOT_STARTED:
            logger.info("checkout.verifier run ignored guard=%s", self.guard.value)
            return self.result or ReturnFlowResult(session_id=session_id)

        self.guard = FlowGuard.IN_PROGRESS
        try:
            self.result = await self._verify(session_id, load_identity)
        except Unauthorized as e:
            if e.redirect_url is None:
                self.result = self._failed(session_id, e.message or VERIFICATION_FAILED)
            else:
                # Pas de token: la navigation vers la connexion est déjà demandée par le client
                logger.info("checkout.verifier sign-in required session_id=%s", session_id)
                self.result = ReturnFlowResult(
                    valid=False, error=e.message, session_id=session_id, redirect_url=e.redirect_url
                )
        except StorefrontError as e:
            self.result = self._failed(session_id, e.message or VERIFICATION_FAILED)
        except Exception:
            logger.exception("checkout.verifier unexpected error session_id=%s", session_id)
            self.result = self._failed(session_id, "Failed to verify payment")
        finally:
            self.guard = FlowGuard.DONE
        return self.result

    def _failed(self, session_id: Optional[str], error: str) -> ReturnFlowResult:
        target = failure_url(error)
        self.navigator.navigate(target, delay=self.redirect_delay)
        return ReturnFlowResult(
            valid=False,
            error=error,
            session_id=session_id,
            redirect_url=target,
            redirect_delay=self.redirect_delay,
        )

    async def _verify(self, session_id: Optional[str], load_identity: IdentityLoader) -> ReturnFlowResult:
        if not session_id:
            return self._failed(session_id, NO_SESSION_ID)

        identity = await load_identity()

        verification = await endpoints.verify_session(self.client, session_id)
        if not (verification.valid and verification.paid):
            logger.info("checkout.verifier invalid session_id=%s error=%s", session_id, verification.error)
            return self._failed(session_id, verification.error or VERIFICATION_FAILED)

        await endpoints.update_purchase(self.client, session_id)

        email, full_name = self._student_identity(identity, verification)
        registrations = await self._register_all(self._items_to_register(verification), email, full_name)

        self.cart.clear()
        logger.info(
            "checkout.verifier success session_id=%s registered=%s/%s",
            session_id,
            sum(1 for r in registrations if r.ok),
            len(registrations),
        )
        return ReturnFlowResult(
            valid=True,
            session_id=session_id,
            customer_email=verification.customer_email,
            amount_total=verification.amount_total,
            currency=verification.currency,
            registrations=registrations,
        )

    @staticmethod
    def _student_identity(identity: Optional[Identity], verification: VerifySessionResponse):
        email = (identity.email if identity else None) or verification.email or verification.customer_email
        full_name = (identity.full_name if identity else None) or verification.full_name
        if not email or not full_name:
            raise PreconditionFailed(MISSING_IDENTITY)
        return email, full_name

    def _items_to_register(self, verification: VerifySessionResponse) -> List[CartItem]:
        items = self.cart.list()
        if items:
            return items
        # Retour dans un nouvel onglet: panier vide, on se rabat sur la réponse de vérification
        if verification.batch_number in (None, ""):
            return []
        return [
            CartItem(
                id=f"session-batch-{verification.batch_number}",
                name="",
                price=0,
                batch_number=verification.batch_number,
            )
        ]

    async def _register_all(self, items: List[CartItem], email: str, full_name: str) -> List[Registration]:
        registrations: List[Registration] = []
        for item in items:
            if item.batch_number in (None, ""):
                logger.info("checkout.verifier skip item without batch id=%s", item.id)
                continue
            payload = RegisterStudentRequest(
                batch_number=item.batch_number,
                full_name=full_name,
                email=email,
                start_date=item.start_date,
                end_date=item.end_date,
            )
            try:
                res = await endpoints.register_student(self.client, payload)
            except StorefrontError as e:
                logger.error("checkout.verifier register_student failed batch=%s error=%s", item.batch_number, e.message)
                registrations.append(Registration(batch_number=item.batch_number, ok=False, message=e.message))
                continue
            if res.warning:
                logger.warning("checkout.verifier register_student warning batch=%s warning=%s", item.batch_number, res.warning)
            registrations.append(
                Registration(batch_number=item.batch_number, ok=True, message=res.message, warning=res.warning)
            )
        return registrations
