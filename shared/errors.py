"""Error taxonomy shared by the services.

Routers translate these into `HTTPException`s; nothing below the router layer
knows about HTTP.
"""


class MarketplaceError(Exception):
    """Base class for domain errors."""


class InvalidRequest(MarketplaceError):
    """Caller input failed validation (missing or out-of-range fields)."""


class Unauthorized(MarketplaceError):
    """Caller identity does not own the target resource."""


class NotFound(MarketplaceError):
    """Referenced document is absent."""


class StoreFault(MarketplaceError):
    """An underlying store operation failed."""


class SearchFailed(StoreFault):
    """A provider search was aborted by a store fault."""
