"""
Service provider profiles.

`serviceProviders/{userId}` is the single source of truth for a provider's
offering; public profile fields stay on `users/{userId}` and are joined at read
time.
"""

import logging
from typing import Optional

from shared.errors import Unauthorized
from shared.schemas import OFFER_CATEGORIES, WEEKDAYS
from shared.store import DocumentStore

from services.search.app.geohash import DEFAULT_PRECISION, encode

from .schemas import ProviderSettings

logger = logging.getLogger(__name__)

PROVIDERS = "serviceProviders"


def default_profile(user_id: str) -> dict:
    return {
        "id": user_id,
        "userId": user_id,
        "services": {category: False for category in OFFER_CATEGORIES},
        "extraOptions": {},
        "workingPreferences": {
            "serviceArea": {
                "fullAddress": "",
                "coordinates": {"latitude": 0, "longitude": 0},
                "country": "",
                "countryCode": "",
                "radius": 0,
                "geohash": encode(0, 0, DEFAULT_PRECISION),
            },
            "workingSchedule": {
                day: {"isActive": False, "startTime": None, "endTime": None} for day in WEEKDAYS
            },
        },
        # inactive until the provider enables a service
        "isActive": False,
        "rating": 0,
        "totalJobs": 0,
    }


def create_default_profile(store: DocumentStore, user_id: str, user_data: Optional[dict]) -> bool:
    """User-created trigger. Returns True when a provider profile was written."""
    if not user_data:
        logger.error("No user data found for userId: %s", user_id)
        return False
    if not user_data.get("isServiceProvider"):
        logger.info("User %s is not a service provider, skipping profile creation", user_id)
        return False

    store.set(PROVIDERS, user_id, default_profile(user_id))
    logger.info("Service provider profile created for user: %s", user_id)
    return True


def update_provider_settings(
    store: DocumentStore, caller_id: str, user_id: str, settings: ProviderSettings
) -> dict:
    """Apply a provider's own settings update and return the written fields.

    Raises:
        Unauthorized: caller is not the provider.
        NotFound: no provider profile for user_id.
    """
    if caller_id != user_id:
        raise Unauthorized("Unauthorized")

    update_data = {
        "services": dict(settings.services),
        "extraOptions": dict(settings.extra_options),
        "isActive": any(settings.services.values()),
    }

    prefs = settings.working_preferences
    if prefs is not None:
        prefs_data = {k: v for k, v in prefs.model_dump(by_alias=True).items() if v is not None}
        area = prefs.service_area
        if area is not None:
            # stale until the next edit, so recompute on every write
            prefs_data["serviceArea"]["geohash"] = encode(
                area.coordinates.latitude, area.coordinates.longitude, DEFAULT_PRECISION
            )
        update_data["workingPreferences"] = prefs_data

    logger.info("Updating service provider profile for user: %s", user_id)
    store.update(PROVIDERS, user_id, update_data)
    return update_data
