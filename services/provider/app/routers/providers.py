from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from shared.auth import current_user
from shared.db import get_store
from shared.errors import NotFound, StoreFault, Unauthorized
from shared.search_cache import SearchCache, get_search_cache
from shared.store import DocumentStore

from .. import schemas
from ..profiles import PROVIDERS, update_provider_settings

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("/{user_id}", response_model=schemas.ProviderOut)
def get_provider(user_id: str, store: DocumentStore = Depends(get_store)):
    doc = store.get(PROVIDERS, user_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Service provider not found")
    return doc


@router.put("/{user_id}/settings", response_model=schemas.Ack)
def update_settings(
    user_id: str,
    payload: schemas.ProviderSettings,
    store: DocumentStore = Depends(get_store),
    user=Depends(current_user),
    cache: Optional[SearchCache] = Depends(get_search_cache),
):
    try:
        update_provider_settings(store, user["id"], user_id, payload)
    except Unauthorized as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreFault as e:
        raise HTTPException(status_code=502, detail=f"Failed to update service provider profile: {e}")
    if cache is not None:
        cache.invalidate()
    return schemas.Ack(message="Service provider profile updated successfully")
