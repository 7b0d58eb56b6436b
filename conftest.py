"""Global pytest configuration."""

import os

# Pin pricing defaults for tests before any imports
os.environ.setdefault("TRIPCOST_BASE_CURRENCY", "USD")
os.environ.setdefault("TRIPCOST_UNKNOWN_CURRENCY_POLICY", "fallback")
