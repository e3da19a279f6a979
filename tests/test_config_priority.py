import pytest

from recordloader.config import Settings, loadSettings


def write_config(tmp_path, text: str):
    cfg = tmp_path / "config.yml"
    cfg.write_text(text, encoding="utf-8")
    return str(cfg)


def no_overrides() -> dict:
    return {"default_source": None, "log_level": None, "retries": None, "tls_skip_verify": None}


def test_defaults_without_config_or_env():
    loaded = loadSettings(config_path=None, cli_overrides=no_overrides())

    assert loaded.settings == Settings()
    assert loaded.sources_used == []


def test_priority_cli_over_env_over_config(tmp_path, monkeypatch):
    cfg = write_config(
        tmp_path,
        "\n".join([
            'default_source: "Summon"',
            'log_level: "DEBUG"',
            "retries: 1",
            "timeout_seconds: 30",
        ]),
    )

    # ENV overrides config
    monkeypatch.setenv("RECORDLOADER_LOG_LEVEL", "WARN")
    monkeypatch.setenv("RECORDLOADER_RETRIES", "2")

    # CLI overrides env
    overrides = no_overrides()
    overrides["retries"] = 5

    loaded = loadSettings(config_path=cfg, cli_overrides=overrides)

    assert loaded.settings.default_source == "Summon"
    assert loaded.settings.log_level == "WARN"
    assert loaded.settings.retries == 5
    assert loaded.settings.timeout_seconds == 30.0
    assert loaded.sources_used == ["config", "env", "cli"]


def test_backends_and_fallbacks_come_from_config(tmp_path):
    cfg = write_config(
        tmp_path,
        "\n".join([
            "backends:",
            "  Solr:",
            "    API:",
            '      base_url: "https://solr.local"',
            "fallbacks:",
            "  Summon:",
            "    API:",
            '      base_url: "https://summon.local"',
        ]),
    )

    settings = loadSettings(config_path=cfg, cli_overrides=no_overrides()).settings

    assert settings.backends == {"Solr": {"API": {"base_url": "https://solr.local"}}}
    assert list(settings.fallbacks) == ["Summon"]


def test_missing_config_file_is_ignored(tmp_path):
    loaded = loadSettings(config_path=str(tmp_path / "nope.yml"), cli_overrides=no_overrides())

    assert loaded.sources_used == []


def test_invalid_bool_env(monkeypatch):
    monkeypatch.setenv("RECORDLOADER_TLS_SKIP_VERIFY", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean"):
        loadSettings(config_path=None, cli_overrides=no_overrides())


def test_backends_section_must_be_mapping(tmp_path):
    cfg = write_config(tmp_path, 'backends: ["Solr"]')

    with pytest.raises(ValueError, match="backends"):
        loadSettings(config_path=cfg, cli_overrides=no_overrides())
