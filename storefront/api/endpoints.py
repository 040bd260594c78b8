# module storefront.api.endpoints
"""
Appels typés vers l'API backend. Chaque fonction prend le client en premier argument
et laisse remonter les erreurs classées (storefront.api.errors).

Sécurité: l'email n'est jamais envoyé pour créer un utilisateur ni pour annuler une commande,
le backend dérive l'identité du token bearer.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from storefront.api.client import ApiClient
from storefront.api.errors import ProtocolError
from storefront.api.models import (
    Batch,
    CheckoutItem,
    CheckoutSession,
    CreateUserResponse,
    MessageResponse,
    RegisterStudentRequest,
    RegisterStudentResponse,
    StudentOrder,
    VerifySessionResponse,
)

logger = logging.getLogger(__name__)

_HTML_TAG = re.compile(r"<[^>]*>")
_UNSAFE_CHARS = re.compile(r"[<>\"']")

CONTACT_LIMITS = {"email": 255, "category": 100, "message": 10000}


async def get_current_user(client: ApiClient) -> Dict[str, Any]:
    """Utilisateur backend dérivé du token (GET /auth/me)."""
    res = await client.request("GET", "/auth/me", default_error="Failed to get current user")
    data = res.data or {}
    if not isinstance(data, dict):
        raise ProtocolError("Unexpected user payload from backend", status_code=res.status_code, payload=data)
    return data.get("user") or {}


async def create_user(client: ApiClient, full_name: Optional[str] = None, phone: Optional[str] = None) -> CreateUserResponse:
    """Crée ou renvoie l'utilisateur courant (201 créé, 200 déjà existant)."""
    body = {k: v for k, v in {"full_name": full_name, "phone": phone}.items() if v is not None}
    res = await client.request("POST", "/client/create", body=body, default_error="Failed to create user")
    return CreateUserResponse.model_validate(res.data or {})


async def get_client_check_message(client: ApiClient, email: str) -> str:
    """Message générique (anti-énumération): ne pas en déduire l'existence du compte."""
    res = await client.request("GET", "/client/check", params={"email": email}, default_error="Failed to check user")
    return (res.data or {}).get("message", "")


async def create_checkout_session(client: ApiClient, items: List[CheckoutItem]) -> CheckoutSession:
    body = {"items": [item.model_dump(exclude_none=True) for item in items]}
    res = await client.request("POST", "/payments/create-session", body=body, default_error="Failed to create checkout session")
    data = res.data or {}
    if not isinstance(data, dict) or not data.get("url"):
        raise ProtocolError("No checkout URL received from backend", status_code=res.status_code, payload=data)
    return CheckoutSession(url=data["url"])


async def verify_session(client: ApiClient, session_id: str) -> VerifySessionResponse:
    res = await client.request(
        "GET", "/payments/verify-session", params={"session_id": session_id}, default_error="Failed to verify session"
    )
    return VerifySessionResponse.model_validate(res.data or {})


async def update_purchase(client: ApiClient, session_id: str) -> MessageResponse:
    """Passe l'achat de pending à finalisé côté backend."""
    res = await client.request(
        "POST", "/payments/update-session", body={"session_id": session_id}, default_error="Failed to update purchase"
    )
    return MessageResponse.model_validate(res.data or {})


async def register_student(client: ApiClient, payload: RegisterStudentRequest) -> RegisterStudentResponse:
    """Inscrit l'étudiant sur un batch (le backend met à jour le nombre d'inscrits)."""
    res = await client.request(
        "POST", "/student/register", body=payload.model_dump(exclude_none=True), default_error="Failed to register student"
    )
    return RegisterStudentResponse.model_validate(res.data or {})


async def get_student_orders(client: ApiClient, email: Optional[str] = None) -> List[StudentOrder]:
    params = {"email": email} if email is not None else None
    res = await client.request("GET", "/student/orders", params=params, default_error="Failed to fetch student orders")
    rows = (res.data or {}).get("data") or []
    return [StudentOrder.model_validate(row) for row in rows]


async def cancel_order(client: ApiClient, batch_num: int, start_date: str, end_date: str) -> MessageResponse:
    """Annule une commande (statut PENDING CANCEL côté backend, capacité du batch libérée)."""
    body = {"batch_num": batch_num, "start_date": start_date, "end_date": end_date}
    res = await client.request("POST", "/student/cancel", body=body, default_error="Failed to cancel order")
    return MessageResponse.model_validate(res.data or {})


async def get_batches(client: ApiClient) -> List[Batch]:
    res = await client.request("GET", "/batch/get", default_error="Failed to fetch batches")
    rows = res.data if isinstance(res.data, list) else []
    batches: List[Batch] = []
    for row in rows:
        try:
            batches.append(Batch.model_validate(row))
        except ValidationError as e:
            # Une ligne illisible ne masque pas le reste du catalogue
            logger.warning("api.endpoints skip malformed batch row: %s", e.errors(include_input=False))
    return batches


def sanitize_for_contact(value: str, max_length: int) -> str:
    """Supprime balises HTML et caractères < > " ' puis tronque. Le backend doit aussi échapper."""
    no_html = _UNSAFE_CHARS.sub("", _HTML_TAG.sub("", (value or "").strip()))
    return no_html[:max_length]


async def submit_contact_form(client: ApiClient, email: str, category: str, message: str) -> MessageResponse:
    body = {
        "email": sanitize_for_contact(email, CONTACT_LIMITS["email"]),
        "category": sanitize_for_contact(category, CONTACT_LIMITS["category"]),
        "message": sanitize_for_contact(message, CONTACT_LIMITS["message"]),
    }
    res = await client.request("POST", "/form/insert", body=body, default_error="Failed to submit contact form")
    return MessageResponse.model_validate(res.data or {})
