"""Tests for application settings"""

import pytest
from pydantic import ValidationError

from dealcart.core.config import Settings
from dealcart.discounts import StackingPolicy

def test_stacking_policy_parsed_from_string():
    assert Settings(DISCOUNT_STACKING_POLICY="best_value").DISCOUNT_STACKING_POLICY is StackingPolicy.BEST_VALUE

def test_unknown_stacking_policy_fails_at_load(monkeypatch):
    monkeypatch.setenv("DISCOUNT_STACKING_POLICY", "best_valu")

    with pytest.raises(ValidationError):
        Settings()

def test_async_database_url():
    assert Settings(DATABASE_URL="sqlite:///./x.db").database_url_async == "sqlite+aiosqlite:///./x.db"
    assert Settings(DATABASE_URL="postgresql://u@h/db").database_url_async == "postgresql+asyncpg://u@h/db"
