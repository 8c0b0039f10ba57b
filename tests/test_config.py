from abogadai.adapters import config_env
from abogadai.core.config_model import AppConfig


def test_load_app_config_reads_env_settings(monkeypatch):
    monkeypatch.setattr(config_env.env_config, "API_URL", "https://api.abogadai.test")
    monkeypatch.setattr(config_env.env_config, "HTTP_TIMEOUT", 12.0)
    monkeypatch.setattr(config_env.env_config, "AUTOSAVE_DELAY", 0.5)

    settings = config_env.load_app_config()

    assert isinstance(settings, AppConfig)
    assert settings.api_url == "https://api.abogadai.test"
    assert settings.http_timeout == 12.0
    assert settings.autosave_delay == 0.5
