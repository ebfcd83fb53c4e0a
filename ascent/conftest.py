# ascent/conftest.py
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

# Add repo root to PYTHONPATH so `import ascent...` works from any cwd
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def fixed_today():
    """A Wednesday; the Sunday-start week begins 2026-03-15."""
    return date(2026, 3, 18)


@pytest.fixture
def fixed_now():
    """Fixed timestamp for deterministic testing."""
    return datetime(2026, 3, 18, 7, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file."""
    from ascent.core.config import Settings

    return Settings(_env_file=None)
