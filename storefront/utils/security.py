from fastapi import Request
from fastapi.responses import Response
from typing import Optional
from urllib.parse import urlparse
from storefront.config import COOKIE_SECURE

COOKIE_NAME = "sb_access"
CLIENT_COOKIE_NAME = "storefront_client"

def get_request_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token or None

def set_session_cookie(response: Response, access_token: str):
    response.set_cookie(
        key=COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="Lax",
        max_age=60 * 60,
        path="/",
    )

def clear_session_cookie(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")

def request_location(request: Request) -> str:
    """
    Chemin + query de la page courante (cible de retour après connexion).
    - Appel API depuis une page: la page est dans Referer (même hôte uniquement).
    - Sinon: l'URL de la requête elle-même.
    """
    referer = request.headers.get("referer")
    if referer:
        parsed = urlparse(referer)
        if parsed.netloc == request.url.netloc and parsed.path:
            return f"{parsed.path}?{parsed.query}" if parsed.query else parsed.path
    path = request.url.path
    query = request.url.query
    return f"{path}?{query}" if query else path
