from pydantic import Field
from typing import Dict, Optional

from shared.schemas import CamelModel, Coordinates, ProviderProfile, ServiceArea, WorkingPreferences


class SearchRequest(CamelModel):
    service_type: str = Field(min_length=1)
    location: Coordinates


class ProviderResult(CamelModel):
    provider_id: str
    user_id: str
    profile: ProviderProfile
    services: Dict[str, bool]
    extra_options: Dict[str, bool] = Field(default_factory=dict)
    service_area: ServiceArea
    working_preferences: Optional[WorkingPreferences] = None
    rating: Optional[float] = None
    total_jobs: Optional[int] = None
    distance_meters: int
