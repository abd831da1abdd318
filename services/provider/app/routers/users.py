from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from shared.auth import current_user
from shared.db import get_store
from shared.errors import InvalidRequest, NotFound, StoreFault, Unauthorized
from shared.search_cache import SearchCache, get_search_cache
from shared.store import DocumentStore

from .. import schemas
from ..users import create_user, update_user_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201)
def create(payload: schemas.UserCreate, store: DocumentStore = Depends(get_store), user=Depends(current_user)):
    try:
        provider_created = create_user(store, user["id"], payload)
    except Unauthorized as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidRequest as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreFault as e:
        raise HTTPException(status_code=502, detail=f"User creation failed: {e}")
    return {"id": payload.id, "providerProfileCreated": provider_created}


@router.patch("/{user_id}", response_model=schemas.Ack)
def update_profile(
    user_id: str,
    payload: schemas.UserProfileUpdate,
    store: DocumentStore = Depends(get_store),
    user=Depends(current_user),
    cache: Optional[SearchCache] = Depends(get_search_cache),
):
    try:
        update_user_profile(store, user["id"], user_id, payload)
    except Unauthorized as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidRequest as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreFault as e:
        raise HTTPException(status_code=502, detail=f"Profile update failed: {e}")
    if cache is not None:
        cache.invalidate()  # search results embed the public profile
    return schemas.Ack(message="Profile updated successfully")
