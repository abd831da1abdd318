import logging

from shared.errors import InvalidRequest, Unauthorized
from shared.store import DocumentStore
from shared.validation import is_valid_email, is_valid_phone

from .profiles import create_default_profile
from .schemas import UserCreate, UserProfileUpdate

logger = logging.getLogger(__name__)

USERS = "users"


def validate_profile_data(data: dict) -> list[str]:
    errors = []
    if data.get("email") and not is_valid_email(data["email"]):
        errors.append("Invalid email format")
    if data.get("phone") and not is_valid_phone(data["phone"]):
        errors.append("Invalid phone number format")
    return errors


def create_user(store: DocumentStore, caller_id: str, user: UserCreate) -> bool:
    """Write users/{id} and run the user-created trigger.

    Returns whether a provider profile was created alongside.
    """
    if caller_id != user.id:
        raise Unauthorized("User can only create their own record")
    data = user.model_dump(by_alias=True, exclude={"id"})
    errors = validate_profile_data(data)
    if errors:
        raise InvalidRequest(f"Profile validation failed: {', '.join(errors)}")

    store.set(USERS, user.id, data)
    return create_default_profile(store, user.id, store.get(USERS, user.id))


def update_user_profile(store: DocumentStore, caller_id: str, user_id: str, profile: UserProfileUpdate) -> dict:
    if caller_id != user_id:
        raise Unauthorized("User can only update their own profile")

    data = profile.model_dump(by_alias=True, exclude_unset=True)
    errors = validate_profile_data(data)
    if errors:
        raise InvalidRequest(f"Profile validation failed: {', '.join(errors)}")

    store.update(USERS, user_id, data)
    logger.info("Profile updated for user %s: %s", user_id, sorted(data))
    return data
