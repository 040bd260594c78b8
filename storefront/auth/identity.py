# module storefront.auth.identity
"""
Identité de l'utilisateur connecté, résolue auprès du fournisseur d'identité (Supabase Auth).
- resolve_identity(token): supabase.auth.get_user(token) normalisé en Identity.
- None si pas de token ou token rejeté (l'appelant traite comme « non connecté »).
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    token: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None


def _user_as_dict(user: Any) -> Dict[str, Any]:
    if isinstance(user, dict):
        return user
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "phone": getattr(user, "phone", None),
        "user_metadata": getattr(user, "user_metadata", None),
    }


def identity_from_user(user: Dict[str, Any], token: str) -> Optional[Identity]:
    """Normalise un user Supabase {id, email, user_metadata{full_name|name}} en Identity."""
    uid = user.get("id")
    if not uid:
        return None
    metadata = user.get("user_metadata") or {}
    full_name = metadata.get("full_name") or metadata.get("name")
    if not full_name:
        parts = [metadata.get("first_name"), metadata.get("last_name")]
        full_name = " ".join(p for p in parts if p) or None
    return Identity(
        user_id=str(uid),
        token=token,
        email=user.get("email") or None,
        full_name=full_name,
        phone=user.get("phone") or metadata.get("phone") or None,
    )


def _get_user(token: str) -> Dict[str, Any]:
    res = supabase_client.get_supabase().auth.get_user(token)
    user = getattr(res, "user", None) or (res.get("user") if isinstance(res, dict) else None)
    return _user_as_dict(user) if user else {}


async def resolve_identity(token: Optional[str]) -> Optional[Identity]:
    if not token:
        return None
    try:
        # Le client supabase est synchrone: on ne bloque pas la boucle
        user = await asyncio.to_thread(_get_user, token)
    except Exception:
        logger.exception("auth.identity resolve_identity failed")
        return None
    return identity_from_user(user, token)
