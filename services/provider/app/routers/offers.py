from fastapi import APIRouter, Depends, HTTPException

from shared.db import get_store
from shared.errors import StoreFault
from shared.store import DocumentStore

from .. import schemas
from ..offers import OFFERS, on_offer_created

router = APIRouter(prefix="/offers", tags=["offers"])


@router.post("", status_code=201)
def create_offer(payload: schemas.OfferCreate, store: DocumentStore = Depends(get_store)):
    try:
        store.set(OFFERS, payload.id, payload.model_dump(by_alias=True, exclude={"id"}))
        errors = on_offer_created(store, payload.id)
    except StoreFault as e:
        raise HTTPException(status_code=502, detail=f"Offer creation failed: {e}")
    return {"id": payload.id, "isValid": not errors, "validationErrors": errors}
