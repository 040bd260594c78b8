"""
Synchronisation de l'utilisateur backend avant achat.
L'email n'est jamais envoyé: le backend le dérive du token vérifié (anti-usurpation).
"""
import logging
from typing import Optional

from storefront.api import endpoints
from storefront.api.client import ApiClient
from storefront.api.errors import ApiError

logger = logging.getLogger(__name__)


async def ensure_user(client: ApiClient, full_name: Optional[str] = None, phone: Optional[str] = None) -> bool:
    """
    Crée ou retrouve l'utilisateur courant (POST /client/create).
    - True: 201 (créé) ou 200 (existe déjà).
    - False: erreur API (journalisée), l'orchestrateur doit s'arrêter.
    """
    try:
        res = await endpoints.create_user(client, full_name=full_name, phone=phone)
    except ApiError as e:
        logger.warning("checkout.user_sync ensure_user failed status=%s error=%s", e.status_code, e.message)
        return False
    logger.info("checkout.user_sync ensure_user ok message=%s", res.message)
    return True
