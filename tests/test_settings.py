from pathlib import Path

from petadex.core.settings import Settings, get_settings


def test_settings_loads_defaults() -> None:
    settings = get_settings()
    assert settings.app.name == "petadex-catalog"
    assert settings.database.read_only is True
    assert settings.storage.pdb_base_url.endswith("/pdb_structs")


def test_settings_interpolates_environment(tmp_path: Path, monkeypatch) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text(
        "app:\n"
        "  log_level: ${TEST_PETADEX_LEVEL:-INFO}\n"
        "database:\n"
        "  path: ${TEST_PETADEX_DB:-fallback.db}\n"
    )
    monkeypatch.setenv("TEST_PETADEX_LEVEL", "DEBUG")
    monkeypatch.delenv("TEST_PETADEX_DB", raising=False)

    settings = Settings.load(config)

    assert settings.app.log_level == "DEBUG"
    assert settings.database.path == "fallback.db"
    assert settings.api.port == 3001
