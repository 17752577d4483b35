import pytest
from pydantic import ValidationError

from ticket_registry.core.config import Settings, get_settings
from ticket_registry.tickets import BatchPolicy


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.admin_identity is None
    assert settings.batch_policy == BatchPolicy.ATOMIC
    assert settings.max_batch_size == 50
    assert settings.max_info_bytes == 128
    assert settings.min_price == 10
    assert settings.database_url is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ADMIN_IDENTITY", "box-office")
    monkeypatch.setenv("BATCH_POLICY", "best_effort")
    monkeypatch.setenv("MIN_PRICE", "25")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings is get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.admin_identity == "box-office"
    assert settings.batch_policy == BatchPolicy.BEST_EFFORT
    assert settings.min_price == 25


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, batch_policy="sometimes")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, max_batch_size=0)
