# tests/conftest.py
"""
Global test bootstrap
- Points settings at an in-memory SQLite database before the app is imported
- Switches password hashing to the fast testing scheme
- Pulls in the db, app, auth and media fixtures
"""

import os

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (must be set BEFORE importing anything from app.*)
# ──────────────────────────────────────────────────────────────────────────────
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "demo")

from tests.fixtures.db import *          # noqa: F401,F403,E402
from tests.fixtures.media import *       # noqa: F401,F403,E402
from tests.fixtures.auth import *        # noqa: F401,F403,E402
from tests.fixtures.app import *         # noqa: F401,F403,E402
