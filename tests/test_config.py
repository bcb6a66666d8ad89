import json

from minutescribe.core.config import DEFAULT_API_URL, ConfigManager, get_config_manager
from minutescribe.core.token_store import TokenStore


def test_defaults_when_no_file(isolated_config):
    config = get_config_manager().config
    assert config.api_base_url == DEFAULT_API_URL
    assert config.progress_ceiling == 95
    assert config.max_upload_bytes == 50 * 1024 * 1024


def test_environment_overrides_api_url(monkeypatch):
    monkeypatch.setenv("MINUTESCRIBE_API_URL", "https://minutes.example.com/api")
    ConfigManager.reset()
    assert get_config_manager().config.api_base_url == "https://minutes.example.com/api"


def test_save_and_reload(isolated_config):
    manager = get_config_manager()
    manager.set_export_directory("/tmp/exports")
    ConfigManager.reset()

    assert json.loads((isolated_config / "config.json").read_text())["export_directory"] == "/tmp/exports"
    assert str(get_config_manager().get_export_directory()) == "/tmp/exports"


def test_corrupt_file_falls_back_to_defaults(isolated_config):
    isolated_config.mkdir(parents=True, exist_ok=True)
    (isolated_config / "config.json").write_text("{not json")
    assert get_config_manager().config.api_base_url == DEFAULT_API_URL


def test_token_store_round_trip(tmp_path):
    store = TokenStore(tmp_path / "session.json")
    assert store.load() is None
    store.save("abc")
    assert TokenStore(tmp_path / "session.json").load() == "abc"
    store.clear()
    assert store.load() is None
    store.clear()


def test_token_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("garbage")
    assert TokenStore(path).load() is None
