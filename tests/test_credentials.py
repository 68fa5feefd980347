"""Tests for the cookie provider lookup order."""

import pytest

from dingtalk_doc_migrator.credentials import COOKIE_ENV_VAR, CookieProvider, CredentialError


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv(COOKIE_ENV_VAR, raising=False)


class TestCookieProvider:
    """Test explicit > config > environment > file."""

    def test_explicit_cookie_wins(self, monkeypatch):
        monkeypatch.setenv(COOKIE_ENV_VAR, 'env=1')
        provider = CookieProvider({'dingtalk': {'cookie': 'config=1'}})

        assert provider.get_cookie('  explicit=1 ') == 'explicit=1'

    def test_config_cookie(self, monkeypatch):
        monkeypatch.setenv(COOKIE_ENV_VAR, 'env=1')

        assert CookieProvider({'dingtalk': {'cookie': 'config=1'}}).get_cookie() == 'config=1'

    def test_unsubstituted_config_cookie_ignored(self, monkeypatch):
        monkeypatch.setenv(COOKIE_ENV_VAR, 'env=1')

        assert CookieProvider({'dingtalk': {'cookie': '${DINGTALK_COOKIE}'}}).get_cookie() == 'env=1'

    def test_cookie_file(self, tmp_path):
        cookie_file = tmp_path / 'cookie.txt'
        cookie_file.write_text('file=1\n', encoding='utf-8')

        assert CookieProvider({'dingtalk': {'cookie_file': str(cookie_file)}}).get_cookie() == 'file=1'

    def test_blank_explicit_cookie_falls_through(self, tmp_path):
        cookie_file = tmp_path / 'cookie.txt'
        cookie_file.write_text('file=1', encoding='utf-8')

        assert CookieProvider({'dingtalk': {'cookie_file': str(cookie_file)}}).get_cookie('  ') == 'file=1'

    def test_nothing_available(self, tmp_path):
        provider = CookieProvider({'dingtalk': {'cookie_file': str(tmp_path / 'missing.txt')}})

        with pytest.raises(CredentialError) as exc_info:
            provider.get_cookie()

        assert COOKIE_ENV_VAR in str(exc_info.value)
