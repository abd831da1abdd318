"""
Provider search over the geohash-indexed `serviceProviders` collection.

A search scans one sorted-key range per geohash prefix, merges the hits, and
keeps a provider only when the query point lies inside the provider's own
declared service area (exact haversine check). The scan radius only bounds
which index cells are read.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from pydantic import ValidationError

from shared.errors import InvalidRequest, SearchFailed, StoreFault
from shared.schemas import ProviderProfile, ServiceArea
from shared.store import DocumentStore, Predicate, Snapshot

from .geohash import haversine_km, prefixes_for_search
from .schemas import ProviderResult, SearchRequest

logger = logging.getLogger(__name__)

PROVIDERS = "serviceProviders"
USERS = "users"
GEOHASH_FIELD = "workingPreferences.serviceArea.geohash"
# sorts after every geohash character, so [prefix, prefix + "~") means "starts with prefix"
PREFIX_SUCCESSOR = "~"
DEFAULT_SCAN_RADIUS_METERS = 50_000


class ProviderSearchEngine:
    def __init__(self, store: DocumentStore, *, scan_radius_meters: float = DEFAULT_SCAN_RADIUS_METERS):
        self.store = store
        self.scan_radius_meters = scan_radius_meters

    def search(self, service_type: Any, location: Any) -> list[ProviderResult]:
        """Active providers offering service_type whose service area covers location.

        Raises:
            InvalidRequest: bad category or location.
            SearchFailed: a store read failed; no partial result is returned.
        """
        query = _validate(service_type, location)
        lat, lon = query.location.latitude, query.location.longitude
        logger.info("Searching for %s providers near %s, %s", query.service_type, lat, lon)

        results: list[ProviderResult] = []
        for snap in self._scan(query.service_type, lat, lon):
            area = _service_area(snap)
            if area is None:
                continue

            distance_km = haversine_km(lat, lon, area.coordinates.latitude, area.coordinates.longitude)
            if distance_km > area.radius / 1000:
                continue

            user_id = str(snap.data.get("userId") or snap.id)
            profile = self._profile(user_id)
            result = _result(snap, user_id, profile, area, distance_km)
            if result is not None:
                results.append(result)

        # list.sort is stable: ties keep scan order
        results.sort(key=lambda r: r.distance_meters)
        logger.info("Found %d service providers for %s", len(results), query.service_type)
        return results

    def _scan(self, service_type: str, lat: float, lon: float) -> Iterator[Snapshot]:
        seen: set[str] = set()
        for prefix in prefixes_for_search(lat, lon, self.scan_radius_meters):
            predicates = [
                Predicate("isActive", "==", True),
                Predicate(f"services.{service_type}", "==", True),
                Predicate(GEOHASH_FIELD, ">=", prefix),
                Predicate(GEOHASH_FIELD, "<", prefix + PREFIX_SUCCESSOR),
            ]
            try:
                snapshots = self.store.query(PROVIDERS, predicates)
            except StoreFault as e:
                logger.error("Range scan for prefix %r failed: %s", prefix, e)
                raise SearchFailed(f"range scan for prefix {prefix!r} failed: {e}") from e

            for snap in snapshots:
                if snap.id in seen:
                    continue
                seen.add(snap.id)
                yield snap

    def _profile(self, user_id: str) -> ProviderProfile:
        try:
            user = self.store.get(USERS, user_id)
        except StoreFault as e:
            logger.error("Profile lookup for user %r failed: %s", user_id, e)
            raise SearchFailed(f"profile lookup for user {user_id!r} failed: {e}") from e
        if not user:
            return ProviderProfile()
        return ProviderProfile(
            first_name=user.get("firstName") or "",
            last_name=user.get("lastName") or "",
            profile_image=user.get("profileImage"),
            phone=user.get("phone") or "",
        )


def _validate(service_type: Any, location: Any) -> SearchRequest:
    if not isinstance(service_type, str) or not service_type.strip() or "." in service_type:
        raise InvalidRequest("serviceType must be a non-empty category name")
    if location is None:
        raise InvalidRequest("location is required")
    try:
        return SearchRequest(service_type=service_type.strip(), location=location)
    except ValidationError as e:
        raise InvalidRequest(f"Invalid location: {e.errors(include_url=False)}") from e


def _service_area(snap: Snapshot) -> Optional[ServiceArea]:
    prefs = snap.data.get("workingPreferences")
    raw = prefs.get("serviceArea") if isinstance(prefs, dict) else None
    if raw is None:
        logger.debug("Skipping provider %s: no service area", snap.id)
        return None
    try:
        return ServiceArea.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping provider %s: malformed service area (%s)", snap.id, e.error_count())
        return None


def _result(
    snap: Snapshot, user_id: str, profile: ProviderProfile, area: ServiceArea, distance_km: float
) -> Optional[ProviderResult]:
    data = snap.data
    try:
        return ProviderResult(
            provider_id=snap.id,
            user_id=user_id,
            profile=profile,
            services=data.get("services") or {},
            extra_options=data.get("extraOptions") or {},
            service_area=area,
            working_preferences=data.get("workingPreferences"),
            rating=data.get("rating"),
            total_jobs=data.get("totalJobs"),
            distance_meters=round(distance_km * 1000),
        )
    except ValidationError as e:
        logger.debug("Skipping provider %s: malformed record (%s)", snap.id, e.error_count())
        return None
