"""
Module 'cart' (feature-first): point d'entrée public.
Réunit le modèle CartItem, les stockages durables et le CartStore.
"""

from .models import CartItem, make_item_id
from .storage import KeyValueStorage, MemoryStorage, RedisStorage
from .store import CartStore, CART_STORAGE_KEY, SESSION_MARKER_KEY

__all__ = [
    # models
    "CartItem",
    "make_item_id",
    # storage
    "KeyValueStorage",
    "MemoryStorage",
    "RedisStorage",
    # store
    "CartStore",
    "CART_STORAGE_KEY",
    "SESSION_MARKER_KEY",
]
