from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, Optional

OFFER_CATEGORIES = ("classic-cleaning", "deep-cleaning", "end-of-tenancy")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class CamelModel(BaseModel):
    # camelCase on the wire and in stored documents, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ServiceArea(CamelModel):
    full_address: str = ""
    coordinates: Coordinates
    country: str = ""
    country_code: str = ""
    radius: float = Field(ge=0)  # meters
    geohash: Optional[str] = None


class WorkingDay(CamelModel):
    is_active: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class WorkingPreferences(CamelModel):
    service_area: Optional[ServiceArea] = None
    working_schedule: Optional[Dict[str, WorkingDay]] = None


class ProviderProfile(CamelModel):
    first_name: str = ""
    last_name: str = ""
    profile_image: Optional[str] = None
    phone: str = ""
