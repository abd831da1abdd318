import logging

from shared.store import DocumentStore, now_iso
from shared.validation import is_valid_price, is_valid_string, validate_required_fields

logger = logging.getLogger(__name__)

OFFERS = "offers"


def validate_offer(offer: dict) -> list[str]:
    errors = validate_required_fields(offer, ["title", "description", "price", "serviceProviderId"])

    if not is_valid_string(offer.get("title"), 3):
        errors.append("Offer title must be at least 3 characters long")
    if not is_valid_string(offer.get("description"), 10):
        errors.append("Offer description must be at least 10 characters long")
    if not is_valid_price(offer.get("price")):
        errors.append("Offer price must be greater than 0")

    return errors


def on_offer_created(store: DocumentStore, offer_id: str) -> list[str]:
    """Offer-created trigger: mark the stored offer valid or record its errors."""
    offer = store.get(OFFERS, offer_id)
    if not offer:
        return []

    logger.info("New offer created: %s", offer_id)
    errors = validate_offer(offer)
    if errors:
        store.update(OFFERS, offer_id, {"validationErrors": errors, "isValid": False})
    else:
        store.update(OFFERS, offer_id, {"isValid": True, "validatedAt": now_iso()})
    return errors
