"""
Configuration Tests

Tests validate:
- Defaults when the environment is empty
- Environment overrides and their validation
"""

import os
from unittest.mock import patch

import pytest

from skillswap.config import (
    DEFAULT_DISPLAY_RATING,
    DEFAULT_PAGE_SIZE,
    INITIAL_RATING_RANGE,
    MAX_PAGE_SIZE,
    SkillSwapConfig,
)


class TestSkillSwapConfig:

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = SkillSwapConfig.from_env()

        assert config.database_url is None
        assert config.admin_api_key is None
        assert not config.uses_postgres
        assert config.default_page_size == DEFAULT_PAGE_SIZE == 4
        assert config.max_page_size == MAX_PAGE_SIZE == 50
        assert config.default_display_rating == DEFAULT_DISPLAY_RATING == 3.5
        assert config.initial_rating_range == INITIAL_RATING_RANGE
        assert config.cors_allow_origins == ("*",)
        assert config.log_level == "INFO"

    def test_environment_overrides(self):
        env = {
            "DATABASE_URL": "postgresql://localhost/skillswap",
            "ADMIN_API_KEY": "secret",
            "SKILLSWAP_DEFAULT_PAGE_SIZE": "10",
            "SKILLSWAP_MAX_PAGE_SIZE": "20",
            "CORS_ALLOW_ORIGINS": "https://a.example, https://b.example",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            config = SkillSwapConfig.from_env()

        assert config.uses_postgres
        assert config.admin_api_key == "secret"
        assert config.default_page_size == 10
        assert config.max_page_size == 20
        assert config.cors_allow_origins == ("https://a.example", "https://b.example")
        assert config.log_level == "DEBUG"

    def test_non_integer_page_size(self):
        with patch.dict(os.environ, {"SKILLSWAP_DEFAULT_PAGE_SIZE": "four"}, clear=True):
            with pytest.raises(ValueError):
                SkillSwapConfig.from_env()

    @pytest.mark.parametrize("kwargs", [
        {"default_page_size": 0},
        {"default_page_size": 10, "max_page_size": 5},
        {"initial_rating_range": (4.0, 3.0)},
        {"initial_rating_range": (3.0, 6.0)},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SkillSwapConfig(**kwargs)
