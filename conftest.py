"""Global pytest configuration."""

import os

# Set auth/logging defaults for tests before any imports
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes!")
os.environ.setdefault("LOG_FORMAT", "text")
