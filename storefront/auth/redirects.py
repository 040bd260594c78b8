"""
Cibles de redirection du flux de connexion.
- sign_in_url: page de connexion avec la page courante comme cible de retour.
- safe_redirect_path: n'accepte que des chemins relatifs même origine (anti open-redirect).
"""
import re
import urllib.parse
from typing import Optional

from storefront.config import SIGN_IN_PATH

_SCHEME_IN_FIRST_SEGMENT = re.compile(r"^/[^/]*:")


def sign_in_url(location: str) -> str:
    return f"{SIGN_IN_PATH}?redirect_url={urllib.parse.quote(location or '/', safe='')}"


def safe_redirect_path(raw: Optional[str]) -> str:
    if not raw:
        return "/"
    try:
        decoded = urllib.parse.unquote(raw)
    except Exception:
        return "/"
    if decoded.startswith("/") and not decoded.startswith(("//", "/\\")) and not _SCHEME_IN_FIRST_SEGMENT.match(decoded):
        return decoded
    return "/"
