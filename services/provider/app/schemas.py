from pydantic import Field
from typing import Dict, Optional

from shared.schemas import CamelModel, WorkingPreferences


class ProviderSettings(CamelModel):
    services: Dict[str, bool]
    extra_options: Dict[str, bool] = Field(default_factory=dict)
    working_preferences: Optional[WorkingPreferences] = None


class ProviderOut(CamelModel):
    id: str
    user_id: str
    services: Dict[str, bool]
    extra_options: Dict[str, bool] = Field(default_factory=dict)
    working_preferences: Optional[WorkingPreferences] = None
    is_active: bool
    rating: float = 0
    total_jobs: int = 0


class UserCreate(CamelModel):
    id: str = Field(min_length=1, max_length=128)
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    dob: Optional[str] = None
    is_service_provider: bool = False
    profile_image: Optional[str] = None


class UserProfileUpdate(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image: Optional[str] = None


class OfferCreate(CamelModel):
    id: str = Field(min_length=1, max_length=128)
    title: str = ""
    description: str = ""
    price: float = 0
    service_provider_id: str = ""


class Ack(CamelModel):
    success: bool = True
    message: str
