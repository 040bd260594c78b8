"""
Langue d'affichage choisie par l'utilisateur, persistée dans le stockage durable du navigateur.
"""
from typing import Tuple

from storefront.cart.storage import KeyValueStorage

LANGUAGE_STORAGE_KEY = "storefront-language"
SUPPORTED_LANGUAGES: Tuple[str, ...] = ("en", "tr", "ru", "zh")
DEFAULT_LANGUAGE = "en"


def get_language(storage: KeyValueStorage) -> str:
    saved = storage.get(LANGUAGE_STORAGE_KEY)
    return saved if saved in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def set_language(storage: KeyValueStorage, language: str) -> str:
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    storage.set(LANGUAGE_STORAGE_KEY, language)
    return language
