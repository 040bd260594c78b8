"""
Formulaire de contact: champs requis vérifiés localement, nettoyage HTML puis envoi
(POST /form/insert). Non critique pour la sécurité: le backend doit aussi échapper.
"""
from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.errors import PreconditionFailed

CATEGORIES = ("Bug", "Feedback", "General", "Cancel Order", "Other")


async def submit(client: ApiClient, email: str, category: str, message: str) -> str:
    if not (email or "").strip() or not (category or "").strip() or not (message or "").strip():
        raise PreconditionFailed("Please fill in all fields")
    res = await endpoints.submit_contact_form(client, email=email, category=category, message=message)
    return res.message or "Thank you! Your message has been sent successfully."
