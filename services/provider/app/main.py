import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Depends

from shared.db import get_store, init_db
from shared.logging import configure_logging
from shared.store import DocumentStore

from .profiles import PROVIDERS
from .routers import offers, providers, users

configure_logging()

SERVICE_NAME = "Cleaning Marketplace Provider Service"
VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Provider Service", version=VERSION, lifespan=lifespan)


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": VERSION,
    }


@app.get("/ready")
def ready(store: DocumentStore = Depends(get_store)):
    try:
        store.get(PROVIDERS, "__ready__")
        return {"ready": True}
    except Exception:
        return {"ready": False}


@app.get("/status")
def status(store: DocumentStore = Depends(get_store)):
    try:
        store.get(PROVIDERS, "__ready__")
        store_status = "connected"
    except Exception:
        store_status = "unavailable"
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": store_status,
        "functions": "running",
        "environment": os.getenv("APP_ENV", "development"),
    }


@app.get("/api-docs")
def api_docs():
    return {
        "name": "Cleaning Marketplace API",
        "version": VERSION,
        "endpoints": {
            "health": "/health",
            "status": "/status",
            "docs": "/api-docs",
        },
        "functions": {
            "createUser": "POST /users - creates a user and, for providers, a default provider profile",
            "updateUserProfile": "PATCH /users/{id} - updates the caller's own profile",
            "getServiceProvider": "GET /providers/{id}",
            "updateServiceProviderSettings": "PUT /providers/{id}/settings - caller's own services and area",
            "createOffer": "POST /offers - stores and validates an offer",
            "searchServiceProviders": "POST /search/providers (search service)",
            "processPayment": "POST /payments/process (payments service)",
            "appointmentEvents": "POST /events/appointments (notifications service)",
        },
    }


app.include_router(users.router)
app.include_router(providers.router)
app.include_router(offers.router)
