"""
Connexion côté storefront.
La page de connexion elle-même est servie par le fournisseur d'identité: le storefront reçoit
l'access_token, le dépose en cookie HttpOnly et renvoie vers la page d'origine (même origine uniquement).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field
from starlette.status import HTTP_303_SEE_OTHER

from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.utils.dependencies import get_api_client, get_identity
from storefront.utils.security import clear_session_cookie, get_request_token, set_session_cookie

from .identity import Identity, resolve_identity
from .redirects import safe_redirect_path

logger = logging.getLogger(__name__)

web_router = APIRouter(tags=["Auth Web"])
api_router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])


class SessionRequest(BaseModel):
    access_token: str = Field(min_length=1)
    redirect_url: Optional[str] = None


@web_router.get("/sign-in")
async def sign_in_page(request: Request, redirect_url: Optional[str] = None):
    """Déjà connecté: retour direct vers la cible. Sinon: cible de retour nettoyée pour le formulaire."""
    target = safe_redirect_path(redirect_url)
    identity = await resolve_identity(get_request_token(request))
    if identity is not None:
        return RedirectResponse(url=target, status_code=HTTP_303_SEE_OTHER)
    return {"signed_in": False, "redirect_url": target}


@api_router.post("/session")
async def create_session(body: SessionRequest, response: Response):
    identity = await resolve_identity(body.access_token)
    if identity is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    set_session_cookie(response, body.access_token)
    logger.info("auth.views session created user_id=%s", identity.user_id)
    return {"ok": True, "redirect_url": safe_redirect_path(body.redirect_url)}


@api_router.get("/me")
async def me(identity: Optional[Identity] = Depends(get_identity), client: ApiClient = Depends(get_api_client)):
    """Identité (fournisseur d'identité) + utilisateur backend associé au token."""
    if identity is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    backend_user = await endpoints.get_current_user(client)
    return {"id": identity.user_id, "email": identity.email, "full_name": identity.full_name, "backend_user": backend_user}


@api_router.get("/check")
async def check_account(email: str, client: ApiClient = Depends(get_api_client)):
    """Message générique du backend: ne révèle pas si le compte existe."""
    return {"message": await endpoints.get_client_check_message(client, email)}


@api_router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"ok": True}
