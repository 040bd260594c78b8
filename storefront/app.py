# module storefront.app
from fastapi import FastAPI

from storefront.app_setup.exceptions import register_exception_handlers
from storefront.app_setup.lifespan import lifespan
from storefront.app_setup.middlewares import (
    register_basic_middlewares,
    register_client_cookie_middleware,
    register_security_middleware,
)
from storefront.app_setup.routers import register_routers


def create_app() -> FastAPI:
    """
    Crée et configure l'instance FastAPI du storefront.
    Ordre:
      1) register_basic_middlewares: session de navigation, CORS, TrustedHost, proxy.
      2) register_client_cookie_middleware: cookie storefront_client (clé du stockage durable).
      3) register_security_middleware: en-têtes de sécurité + CSP.
      4) register_exception_handlers: erreurs storefront/API -> JSON ou 303 vers /sign-in.
      5) register_routers: web, API v1, health.
    """
    app = FastAPI(title="Storefront", lifespan=lifespan)
    register_basic_middlewares(app)
    register_client_cookie_middleware(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app


# App globale
app = create_app()
