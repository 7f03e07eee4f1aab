import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from crop_advisor.services import cache


@pytest.fixture(autouse=True)
def memory_cache(monkeypatch):
    """Keep every test on the in-memory cache, starting empty"""
    monkeypatch.setattr(cache, "supabase_client", None)
    cache._memory_cache.clear()
    yield cache._memory_cache
    cache._memory_cache.clear()
