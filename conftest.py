"""Global pytest configuration."""

import os

# Keep tests away from any real session file or upstream API
os.environ.setdefault("API_BASE_URL", "http://itinerary.test/api")
os.environ.setdefault("TOKEN_STORE_PATH", ".pytest_itinerary_session.json")
