from datetime import datetime, timezone

import pytest


@pytest.fixture
def epoch() -> datetime:
    return datetime(1970, 1, 1, tzinfo=timezone.utc)
