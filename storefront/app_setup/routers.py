"""
Registre central des routers.
- Web: sign-in, retour de paiement (succès / annulation)
- API v1: auth, panier, checkout, commandes, batches, contact, préférences
- Health
"""
from fastapi import FastAPI

from storefront.auth.views import web_router as auth_web_router, api_router as auth_api_router
from storefront.batches import views as batches_views
from storefront.cart import views as cart_views
from storefront.checkout.views import web_router as checkout_web_router, api_router as checkout_api_router
from storefront.contact import views as contact_views
from storefront.health.router import router as health_router
from storefront.orders import views as orders_views
from storefront.preferences import views as preferences_views


def register_routers(app: FastAPI) -> None:
    # Pages web
    app.include_router(auth_web_router)
    app.include_router(checkout_web_router)
    # API v1
    app.include_router(auth_api_router)
    app.include_router(cart_views.router)
    app.include_router(checkout_api_router)
    app.include_router(orders_views.router)
    app.include_router(batches_views.router)
    app.include_router(contact_views.router)
    app.include_router(preferences_views.router)
    # Health & monitoring
    app.include_router(health_router)
