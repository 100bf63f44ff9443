import pytest
from pydantic import ValidationError

from profile_analyzer.core.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    settings = Settings(_env_file=None)

    assert settings.API_PREFIX == "/api/github"
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./local.db"
    assert settings.GITHUB_TOKEN is None
    assert settings.GITHUB_PAGE_SIZE == 100
    assert settings.CACHE_VALIDITY_MINUTES == 30


def test_postgres_url_is_rewritten_for_psycopg():
    settings = Settings(_env_file=None, DATABASE_URL="postgres://user:pass@db:5432/analyzer")

    assert settings.DATABASE_URL == "postgresql+psycopg://user:pass@db:5432/analyzer"


def test_other_urls_untouched():
    url = "postgresql+psycopg://user:pass@db:5432/analyzer"

    assert Settings(_env_file=None, DATABASE_URL=url).DATABASE_URL == url


def test_blank_token_is_none():
    assert Settings(_env_file=None, GITHUB_TOKEN="   ").GITHUB_TOKEN is None
    assert Settings(_env_file=None, GITHUB_TOKEN=" ghp_abc ").GITHUB_TOKEN == "ghp_abc"


@pytest.mark.parametrize("page_size", [0, 101])
def test_page_size_out_of_range(page_size):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, GITHUB_PAGE_SIZE=page_size)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CACHE_VALIDITY_MINUTES", "5")
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")

    settings = Settings(_env_file=None)

    assert settings.CACHE_VALIDITY_MINUTES == 5
    assert settings.GITHUB_TOKEN == "from-env"
