"""
Tests for choosing the storage backend at startup
"""
import pytest

from arcade_market import config
from arcade_market.config import PLACEHOLDER_SUPABASE_KEY, PLACEHOLDER_SUPABASE_URL, Settings
from arcade_market.data import create_database


def make_settings(tmp_path, url=None, key=None) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'select.db'}",
        SUPABASE_PROJECT_URL=url,
        SUPABASE_API_KEY=key,
    )


@pytest.mark.unit
class TestRemoteConfigured:
    def test_missing_credentials(self, tmp_path):
        assert not make_settings(tmp_path).remote_backend_configured()
        assert not make_settings(tmp_path, url="https://real.supabase.co").remote_backend_configured()
        assert not make_settings(tmp_path, url="  ", key="  ").remote_backend_configured()

    def test_placeholder_credentials(self, tmp_path):
        assert not make_settings(tmp_path, PLACEHOLDER_SUPABASE_URL, "real-key").remote_backend_configured()
        assert not make_settings(
            tmp_path, "https://real.supabase.co", PLACEHOLDER_SUPABASE_KEY
        ).remote_backend_configured()

    def test_real_credentials(self, tmp_path):
        assert make_settings(tmp_path, "https://real.supabase.co", "real-key").remote_backend_configured()

    def test_environment_is_read_when_settings_are_built(self, monkeypatch):
        assert not hasattr(config, "settings")
        monkeypatch.setenv("SUPABASE_PROJECT_URL", "https://late.supabase.co")
        monkeypatch.setenv("SUPABASE_API_KEY", "late-key")
        assert Settings().remote_backend_configured()


@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateDatabase:
    async def test_embedded_without_credentials(self, tmp_path):
        db = create_database(make_settings(tmp_path, PLACEHOLDER_SUPABASE_URL, PLACEHOLDER_SUPABASE_KEY))
        assert db.backend == "embedded"
        await db.close()

    async def test_remote_with_credentials(self, tmp_path):
        db = create_database(make_settings(tmp_path, "https://real.supabase.co/", "real-key"))
        assert db.backend == "remote"
        assert str(db._executor.client.base_url) == "https://real.supabase.co/rest/v1/"
        await db.close()
