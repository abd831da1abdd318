import os

# Radius used only to pick which geohash prefixes are scanned; each provider's own
# service-area radius decides inclusion.
SEARCH_SCAN_RADIUS_METERS = float(os.getenv("SEARCH_SCAN_RADIUS_METERS", "50000"))
