from typing import List, Optional

from fastapi import FastAPI, Depends, HTTPException

from shared.db import get_store
from shared.errors import InvalidRequest, SearchFailed
from shared.logging import configure_logging
from shared.search_cache import SearchCache, get_search_cache
from shared.store import DocumentStore

from .config import SEARCH_SCAN_RADIUS_METERS
from .engine import ProviderSearchEngine, PROVIDERS
from .schemas import ProviderResult

configure_logging()

app = FastAPI(title="Search Service", version="0.1.0")


def get_engine(store: DocumentStore = Depends(get_store)) -> ProviderSearchEngine:
    return ProviderSearchEngine(store, scan_radius_meters=SEARCH_SCAN_RADIUS_METERS)


@app.get("/health")
def health(cache: Optional[SearchCache] = Depends(get_search_cache)):
    if cache is not None and not cache.ping():
        return {"status": "degraded"}  # still OK; search can work without cache
    return {"status": "ok"}


@app.get("/ready")
def ready(store: DocumentStore = Depends(get_store), cache: Optional[SearchCache] = Depends(get_search_cache)):
    try:
        store.get(PROVIDERS, "__ready__")
    except Exception:
        return {"ready": False}
    return {"ready": cache is None or cache.ping()}


@app.post("/search/providers", response_model=List[ProviderResult])
def search_providers(
    payload: dict,
    engine: ProviderSearchEngine = Depends(get_engine),
    cache: Optional[SearchCache] = Depends(get_search_cache),
):
    service_type = payload.get("serviceType", payload.get("service_type"))
    location = payload.get("location")

    key = None
    if cache is not None and isinstance(service_type, str) and isinstance(location, dict):
        try:
            lat, lon = float(location["latitude"]), float(location["longitude"])
        except (KeyError, TypeError, ValueError):
            pass  # let the engine report the bad input
        else:
            key = cache.key_for(service_type, lat, lon)
        cached = cache.get(key) if key else None
        if cached is not None:
            return cached

    try:
        results = engine.search(service_type, location)
    except InvalidRequest as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SearchFailed as e:
        raise HTTPException(status_code=502, detail=f"Failed to search service providers: {e}")

    body = [res.model_dump(mode="json", by_alias=True) for res in results]
    if key:
        cache.set(key, body)
    return body
