from fastapi import APIRouter, Depends

from storefront.api.client import ApiClient
from storefront.api.models import ContactFormRequest
from storefront.utils.dependencies import get_api_client
from storefront.utils.rate_limit import optional_rate_limit

from . import service

router = APIRouter(prefix="/api/v1/contact", tags=["Contact API"])


@router.get("/categories")
def list_categories():
    return {"categories": list(service.CATEGORIES)}


@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def submit_contact(form: ContactFormRequest, client: ApiClient = Depends(get_api_client)):
    """Champs vides: 400 sans appel réseau. Les valeurs sont nettoyées avant envoi."""
    message = await service.submit(client, form.email, form.category, form.message)
    return {"message": message}
