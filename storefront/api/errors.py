"""
Taxonomie des erreurs de l'API backend, classées à la frontière du client HTTP.
"""
from typing import Any, List, Optional

from storefront.errors import StorefrontError


class ApiError(StorefrontError):
    """Erreur d'appel à l'API backend (status HTTP et payload si une réponse est arrivée)."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message, status_code=status_code)
        self.payload = payload


class Unauthorized(ApiError):
    """
    401 du backend.
    - had_token=True: le token envoyé a été rejeté, l'appelant affiche l'erreur (pas de redirection).
    - had_token=False: redirect_url pointe vers la page de connexion avec la page courante en retour.
    """

    def __init__(self, message: str, had_token: bool, redirect_url: Optional[str] = None, payload: Any = None):
        super().__init__(message, status_code=401, payload=payload)
        self.had_token = had_token
        self.redirect_url = redirect_url


class RateLimited(ApiError):
    def __init__(self, message: str, retry_after: Optional[str] = None, payload: Any = None):
        super().__init__(message, status_code=429, payload=payload)
        self.retry_after = retry_after


class RequestFailed(ApiError):
    """Rejet générique côté serveur (4xx/5xx hors 401/429)."""


class ValidationFailed(RequestFailed):
    def __init__(self, message: str, errors: List[Any], status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message, status_code=status_code, payload=payload)
        self.errors = errors


class NetworkError(ApiError):
    """Aucune réponse reçue (connexion refusée, DNS, coupure)."""


class RequestTimeout(ApiError):
    """La requête a dépassé le timeout fixe du client."""


class ProtocolError(ApiError):
    """Réponse 2xx inexploitable (pas du JSON, champ attendu absent)."""
