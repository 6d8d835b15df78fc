import pytest

from notion_shelf.config import AppConfig, Settings, load_dotenv, load_settings
from notion_shelf.core.icons import STATUS_ICONS


def test_load_settings_defaults_without_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    s = load_settings()
    assert s.properties.total_pages == "Total Pages"
    assert s.status_icons == STATUS_ICONS
    assert (s.icon_interval_s, s.pages_interval_s, s.import_interval_s) == (0.25, 0.5, 1.0)


def test_load_settings_yaml_overrides(tmp_path) -> None:
    path = tmp_path / "shelf.yaml"
    path.write_text(
        "properties:\n"
        "  total_pages: Pages\n"
        "  status: Reading Status\n"
        "status_icons:\n"
        "  Paused: \"⏸\"\n"
        "import_interval_s: 2\n"
        "unknown_key: ignored\n",
        encoding="utf-8",
    )
    s = load_settings(str(path))
    assert s.properties.total_pages == "Pages"
    assert s.properties.status == "Reading Status"
    assert s.properties.title == "Title"
    assert s.status_icons["Paused"] == "⏸"
    assert s.status_icons["DNF"] == STATUS_ICONS["DNF"]
    assert s.import_interval_s == 2.0


def test_load_settings_bad_file(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_settings(str(path))
    with pytest.raises(SystemExit):
        load_settings(str(tmp_path / "missing.yaml"))


def test_load_dotenv_keeps_existing_env(tmp_path, monkeypatch) -> None:
    env = tmp_path / ".env"
    env.write_text(
        "# comment\n"
        "export NOTION_API_KEY='secret_abc' # inline\n"
        "NOTION_DATABASE_ID=from-file\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("ENV_PATH", raising=False)
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    monkeypatch.setenv("NOTION_DATABASE_ID", "from-env")

    used = load_dotenv(str(env))
    assert used == str(env.resolve())

    cfg = AppConfig.from_env(timeout_s=10, failed_dir=".", settings=Settings())
    assert cfg.notion_api_key == "secret_abc"
    assert cfg.notion_database_id == "from-env"
    cfg.validate()


def test_validate_requires_credentials() -> None:
    cfg = AppConfig(notion_api_key="", notion_database_id="db", timeout_s=10, failed_dir=".", settings=Settings())
    with pytest.raises(SystemExit):
        cfg.validate()
