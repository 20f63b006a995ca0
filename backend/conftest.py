import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _reset_throttles():
    # throttle history lives in the cache and would leak between tests
    cache.clear()
    yield
    cache.clear()
