"""Global pytest configuration."""

import os

# Settings are cached on first use; pin them before any imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GEOCODE_PACING_MS", "0")
