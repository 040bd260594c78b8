# module storefront.utils.navigation
"""
Navigation du navigateur vue côté serveur.
Les flux (client API, orchestrateur, vérificateur) demandent une navigation;
la vue la traduit en réponse HTTP (303 immédiat, ou en-tête Refresh si différée).
"""
from dataclasses import dataclass
from typing import Optional, Protocol

from fastapi.responses import RedirectResponse, Response
from starlette.status import HTTP_303_SEE_OTHER


class Navigator(Protocol):
    def navigate(self, url: str, delay: float = 0.0) -> None:
        ...


@dataclass
class PendingNavigation:
    url: str
    delay: float = 0.0


class RecordingNavigator:
    """Mémorise la dernière navigation demandée pendant la requête en cours."""

    def __init__(self) -> None:
        self.pending: Optional[PendingNavigation] = None

    def navigate(self, url: str, delay: float = 0.0) -> None:
        self.pending = PendingNavigation(url=url, delay=delay)

    def apply(self, response: Response) -> Response:
        """Ajoute un en-tête Refresh pour une navigation différée."""
        if self.pending and self.pending.delay > 0:
            response.headers["Refresh"] = f"{int(self.pending.delay)}; url={self.pending.url}"
        return response

    def redirect(self) -> Optional[RedirectResponse]:
        """Redirection 303 si une navigation immédiate a été demandée."""
        if self.pending and self.pending.delay <= 0:
            return RedirectResponse(url=self.pending.url, status_code=HTTP_303_SEE_OTHER)
        return None
