from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.cart.storage import KeyValueStorage
from storefront.errors import PreconditionFailed
from storefront.utils.dependencies import get_storage

from .language import SUPPORTED_LANGUAGES, get_language, set_language

router = APIRouter(prefix="/api/v1/preferences", tags=["Preferences API"])


class LanguageUpdate(BaseModel):
    language: str


@router.get("/language")
def read_language(storage: KeyValueStorage = Depends(get_storage)):
    return {"language": get_language(storage), "supported": list(SUPPORTED_LANGUAGES)}


@router.put("/language")
def update_language(body: LanguageUpdate, storage: KeyValueStorage = Depends(get_storage)):
    try:
        language = set_language(storage, body.language)
    except ValueError as e:
        raise PreconditionFailed(str(e))
    return {"language": language, "supported": list(SUPPORTED_LANGUAGES)}
