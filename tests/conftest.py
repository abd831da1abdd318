from __future__ import annotations

import os

# Must be set before any service module reads its config.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PAYMENT_SIMULATED_DELAY_SECONDS", "0")
os.environ.setdefault("NOTIFICATIONS_SUBSCRIBE", "0")
os.environ.setdefault("AUTH_SECRET", "test-secret")
os.environ.setdefault("SEARCH_CACHE_ENABLED", "0")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from services.search.app.geohash import encode
from shared.auth import issue_access
from shared.models import Base
from shared.sql_store import SqlDocumentStore
from shared.store import InMemoryDocumentStore

LAGOS = (6.5244, 3.3792)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def sql_engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    session = sessionmaker(bind=sql_engine, expire_on_commit=False)()
    yield SqlDocumentStore(session)
    session.close()


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {issue_access(user_id)}"}


def provider_doc(
    user_id: str,
    lat: float,
    lon: float,
    *,
    radius: float = 5000,
    services: dict | None = None,
    active: bool = True,
    rating: float = 4.5,
    total_jobs: int = 12,
) -> dict:
    """A stored serviceProviders document, shaped the way the settings update writes it."""
    return {
        "id": user_id,
        "userId": user_id,
        "services": services if services is not None else {"classic-cleaning": True, "deep-cleaning": False},
        "extraOptions": {"ownSupplies": True},
        "workingPreferences": {
            "serviceArea": {
                "fullAddress": "Lagos",
                "coordinates": {"latitude": lat, "longitude": lon},
                "country": "Nigeria",
                "countryCode": "NG",
                "radius": radius,
                "geohash": encode(lat, lon, 7),
            },
        },
        "isActive": active,
        "rating": rating,
        "totalJobs": total_jobs,
    }
