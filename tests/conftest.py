"""
Test environment: settings are read at import time, so override them before
any app module is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret-0123456789abcdef")
os.environ.setdefault("JWT_VALID_ISSUER", "timeshare-test")
os.environ.setdefault("JWT_VALID_AUDIENCE", "timeshare-test-clients")
# Lowest bcrypt cost keeps hashing fast in tests.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
