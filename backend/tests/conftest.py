"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real CMS: the module-level app binds the static provider
os.environ.setdefault("API_GATEWAY_CONTENT_PROVIDER", "static")
os.environ.setdefault("ENVIRONMENT", "test")
