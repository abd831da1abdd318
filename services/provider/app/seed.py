from shared.db import SessionLocal, init_db
from shared.sql_store import SqlDocumentStore
from shared.store import DocumentStore

from .profiles import PROVIDERS, create_default_profile, update_provider_settings
from .schemas import ProviderSettings
from .users import USERS

DEMO_USER_ID = "demo-provider"


def run(store: DocumentStore):
    if store.get(PROVIDERS, DEMO_USER_ID) is not None:
        return
    user = {
        "email": "ada@example.com",
        "firstName": "Ada",
        "lastName": "Okafor",
        "phone": "+234 801 234 5678",
        "isServiceProvider": True,
    }
    store.set(USERS, DEMO_USER_ID, user)
    create_default_profile(store, DEMO_USER_ID, user)
    settings = ProviderSettings.model_validate({
        "services": {"classic-cleaning": True, "deep-cleaning": True, "end-of-tenancy": False},
        "extraOptions": {"ownSupplies": True},
        "workingPreferences": {
            "serviceArea": {
                "fullAddress": "Victoria Island, Lagos",
                "coordinates": {"latitude": 6.4281, "longitude": 3.4219},
                "country": "Nigeria",
                "countryCode": "NG",
                "radius": 15000,
            },
        },
    })
    update_provider_settings(store, DEMO_USER_ID, DEMO_USER_ID, settings)


if __name__ == "__main__":
    init_db()
    db = SessionLocal()
    try:
        run(SqlDocumentStore(db))
    finally:
        db.close()
