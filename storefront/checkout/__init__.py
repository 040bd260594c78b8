"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit la synchro utilisateur, la session de paiement, l'orchestrateur et la vérification au retour.
"""

from .user_sync import ensure_user
from .session import to_checkout_items, create_session
from .orchestrator import CheckoutOrchestrator, CheckoutState
from .verifier import ReturnFlowVerifier, ReturnFlowResult, Registration, FlowGuard, failure_url

__all__ = [
    # user sync
    "ensure_user",
    # session
    "to_checkout_items",
    "create_session",
    # orchestrator
    "CheckoutOrchestrator",
    "CheckoutState",
    # verifier
    "ReturnFlowVerifier",
    "ReturnFlowResult",
    "Registration",
    "FlowGuard",
    "failure_url",
]
