from datetime import timedelta

import pytest

from core.config import AuthConfig, Settings
from core.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("REFRESH_TOKEN_SECRET", raising=False)


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_missing_secret_is_fatal(clean_env):
    with pytest.raises(ConfigurationError):
        AuthConfig.from_settings(make_settings())


def test_refresh_secret_falls_back_to_access_secret(clean_env):
    config = AuthConfig.from_settings(make_settings(JWT_SECRET="only-secret"))

    assert config.access_secret == "only-secret"
    assert config.refresh_secret == "only-secret"


def test_distinct_refresh_secret(clean_env):
    config = AuthConfig.from_settings(make_settings(JWT_SECRET="a", REFRESH_TOKEN_SECRET="b"))

    assert config.access_secret == "a"
    assert config.refresh_secret == "b"


def test_default_policy(clean_env):
    config = AuthConfig.from_settings(
        make_settings(JWT_SECRET="a", ACCESS_TOKEN_EXPIRE_MINUTES=15, REFRESH_TOKEN_EXPIRE_DAYS=7, BCRYPT_ROUNDS=10)
    )

    assert config.access_ttl == timedelta(minutes=15)
    assert config.refresh_ttl == timedelta(days=7)
    assert config.bcrypt_rounds == 10
    assert config.algorithm == "HS256"
