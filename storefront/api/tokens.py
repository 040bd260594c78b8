"""
Fournisseurs de token bearer injectés dans ApiClient à la construction.
Un fournisseur absent, qui lève une exception ou renvoie une chaîne vide
équivaut à « pas de token »: la requête part sans Authorization.
"""
from typing import Awaitable, Callable, Optional, Protocol


class TokenProvider(Protocol):
    async def get_token(self) -> Optional[str]:
        ...


class NoTokenProvider:
    async def get_token(self) -> Optional[str]:
        return None


class StaticTokenProvider:
    """Token déjà connu (ex: cookie de session de la requête entrante)."""

    def __init__(self, token: Optional[str]):
        self._token = token

    async def get_token(self) -> Optional[str]:
        return self._token


class CallableTokenProvider:
    """Adapte une fonction async (ex: getter du fournisseur d'identité)."""

    def __init__(self, getter: Callable[[], Awaitable[Optional[str]]]):
        self._getter = getter

    async def get_token(self) -> Optional[str]:
        return await self._getter()
