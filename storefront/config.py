# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du storefront.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose l'URL de l'API backend, Supabase (identité), Redis (panier + rate limit)
- Sécurité cookies, CORS/hosts
- Chemins de redirection des flux (sign-in, échec de paiement)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

# API backend (source de vérité: users, batches, orders, sessions de paiement)
STOREFRONT_API_URL = _clean_env(os.getenv("STOREFRONT_API_URL") or os.getenv("NEXT_PUBLIC_API_URL") or "http://localhost:4242")
if STOREFRONT_API_URL.endswith("/"):
    STOREFRONT_API_URL = STOREFRONT_API_URL.rstrip("/")

# Timeout fixe des requêtes sortantes (secondes)
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "30"))

# Supabase: fournisseur d'identité (résolution token -> email / nom)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Redis: stockage durable du panier (équivalent localStorage) et rate limiting
REDIS_URL = _clean_env(os.getenv("REDIS_URL") or "redis://127.0.0.1:6379/0")

# Cookies / sessions
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "replace_me_with_a_long_random_secret")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Redirections
SIGN_IN_PATH = os.getenv("SIGN_IN_PATH", "/sign-in")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/checkout/cancel")
FAILURE_REDIRECT_DELAY_SECONDS = float(os.getenv("FAILURE_REDIRECT_DELAY_SECONDS", "3"))
