"""
tests/core/test_core_config.py - core/config.py 테스트
"""

import logging

import pytest

from core.config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_REGION,
    Settings,
    get_default_region,
    get_settings,
    get_version,
    reset_settings,
)
from core.exceptions import ConfigError


class TestSettings:
    """Settings 데이터클래스 테스트"""

    def test_settings_is_frozen(self):
        """설정이 불변인지 확인"""
        with pytest.raises(Exception):  # FrozenInstanceError
            Settings().page_size = 5

    def test_default_values(self):
        settings = Settings()
        assert settings.page_size == DEFAULT_PAGE_SIZE == 20
        assert settings.fanout_workers == 8
        assert settings.fanout_timeout == 0.0
        assert settings.default_region == DEFAULT_REGION

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page_size": 0},
            {"fanout_workers": 0},
            {"fanout_workers": 33},
            {"fanout_timeout": -1},
            {"max_retries": -1},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            Settings(**kwargs)

    def test_log_level_value(self):
        assert Settings(log_level="debug").log_level_value == logging.DEBUG


class TestFromEnv:
    """환경 변수 로딩 테스트"""

    def test_empty_env_uses_defaults(self):
        assert Settings.from_env({}) == Settings()

    def test_values_from_env(self):
        settings = Settings.from_env(
            {
                "AF_PAGE_SIZE": "50",
                "AF_FANOUT_WORKERS": "4",
                "AF_FANOUT_TIMEOUT": "2.5",
                "AF_MAX_RETRIES": "1",
                "AF_LOG_LEVEL": "INFO",
            }
        )
        assert settings.page_size == 50
        assert settings.fanout_workers == 4
        assert settings.fanout_timeout == 2.5
        assert settings.max_retries == 1
        assert settings.log_level == "INFO"

    def test_region_precedence(self):
        """AF_DEFAULT_REGION > AWS_DEFAULT_REGION > 기본값"""
        assert Settings.from_env({"AWS_DEFAULT_REGION": "us-east-1"}).default_region == "us-east-1"
        assert (
            Settings.from_env({"AF_DEFAULT_REGION": "eu-west-1", "AWS_DEFAULT_REGION": "us-east-1"}).default_region
            == "eu-west-1"
        )

    def test_not_a_number(self):
        with pytest.raises(ConfigError) as exc_info:
            Settings.from_env({"AF_PAGE_SIZE": "many"})
        assert exc_info.value.config_key == "AF_PAGE_SIZE"

    def test_blank_value_uses_default(self):
        assert Settings.from_env({"AF_PAGE_SIZE": "  "}).page_size == DEFAULT_PAGE_SIZE


class TestGetSettings:
    def test_cached_until_reset(self, monkeypatch):
        monkeypatch.setenv("AF_PAGE_SIZE", "7")
        first = get_settings()
        monkeypatch.setenv("AF_PAGE_SIZE", "9")

        assert get_settings() is first
        reset_settings()
        assert get_settings().page_size == 9

    def test_default_region(self, monkeypatch):
        monkeypatch.setenv("AF_DEFAULT_REGION", "us-west-2")
        assert get_default_region() == "us-west-2"

    def test_version(self):
        parts = get_version().split(".")
        assert len(parts) >= 2
        assert all(p.isdigit() for p in parts[:2])
