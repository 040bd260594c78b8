# module storefront.cart.store
"""
Panier du navigateur: source de vérité de « ce que l'utilisateur veut acheter »
jusqu'à la fin du checkout.

Persistance:
- chaque mutation réécrit le tableau JSON sous la clé durable CART_STORAGE_KEY;
- nouvelle session de navigation (marqueur absent) => panier persistant effacé,
  départ à vide, marqueur posé;
- données persistées illisibles => panier vide et entrée supprimée.
"""
import json
import logging
from decimal import Decimal
from typing import Any, List, MutableMapping

from pydantic import ValidationError

from .models import CartItem
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "cart"
SESSION_MARKER_KEY = "cart_session_initialized"


class CartStore:
    def __init__(self, storage: KeyValueStorage, session: MutableMapping[str, Any]):
        self.storage = storage
        self.session = session
        self._items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        if not self.session.get(SESSION_MARKER_KEY):
            self.session[SESSION_MARKER_KEY] = "1"
            self.storage.delete(CART_STORAGE_KEY)
            return []

        raw = self.storage.get(CART_STORAGE_KEY)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
            if not isinstance(rows, list):
                raise ValueError("cart payload is not a list")
            return [CartItem.model_validate(row) for row in rows]
        except (ValueError, TypeError, ValidationError) as e:
            # Stockage corrompu: on repart à vide pour ne pas bloquer le panier
            logger.error("cart.store corrupted storage, resetting: %s", e)
            self.storage.delete(CART_STORAGE_KEY)
            return []

    def _save(self) -> None:
        payload = json.dumps([item.model_dump(mode="json") for item in self._items])
        self.storage.set(CART_STORAGE_KEY, payload)

    def add(self, item: CartItem) -> None:
        """Ajoute en fin de panier; id déjà présent => no-op (pas de doublon, pas de mise à jour)."""
        if any(existing.id == item.id for existing in self._items):
            return
        self._items.append(item)
        self._save()

    def remove(self, item_id: str) -> None:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        if len(self._items) != before:
            self._save()

    def clear(self) -> None:
        self._items = []
        self._save()

    def list(self) -> List[CartItem]:
        return list(self._items)

    def total_price(self) -> Decimal:
        return sum((item.price for item in self._items), Decimal("0"))

    def count(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items
