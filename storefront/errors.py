"""
Erreurs de base du storefront.
- StorefrontError: racine commune (message lisible par l'utilisateur).
- PreconditionFailed: garde côté client (panier vide, email/nom/dates manquants, batch absent).
Les erreurs réseau/API sont dans storefront.api.errors.
"""
from typing import Optional


class StorefrontError(Exception):
    """Erreur affichable: `message` est destiné à l'utilisateur final."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class PreconditionFailed(StorefrontError):
    """Action refusée localement, aucun appel réseau n'a été fait."""
