from pathlib import Path

from task_organizer.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("TASKS_DATA_DIR", "HOST", "PORT", "LOG_LEVEL", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.data_dir == Path("data")
    assert settings.port == 3000
    assert settings.cors_origins == ("*",)


def test_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    settings = Settings.from_env()
    assert settings.data_dir == tmp_path
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ("http://a.test", "http://b.test")
