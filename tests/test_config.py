from coaching.config import (
    DEFAULT_GEMINI_MODEL,
    Settings,
    extraction_config_from_env,
    load_settings,
    oauth_config_from_env,
    save_settings,
)


def test_missing_settings_file_gives_empty_settings(tmp_path) -> None:
    s = load_settings(tmp_path / "nope.json")
    assert s == Settings()
    assert not s.has_store
    assert not s.has_client
    assert not s.has_api_key


def test_saved_settings_survive_a_restart(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"
    save_settings(Settings(spreadsheet_id="sheet", client_id="client", api_key="key"), path)
    assert load_settings(path) == Settings(spreadsheet_id="sheet", client_id="client", api_key="key")


def test_environment_overrides_stored_values(tmp_path, monkeypatch) -> None:
    path = tmp_path / "settings.json"
    save_settings(Settings(spreadsheet_id="stored", api_key="stored-key"), path)
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    s = load_settings(path)
    assert s.api_key == "env-key"
    assert s.spreadsheet_id == "stored"


def test_unreadable_settings_file_is_ignored(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == Settings()


def test_default_path_comes_from_environment(tmp_path) -> None:
    saved = save_settings(Settings(spreadsheet_id="x"))
    assert saved == tmp_path / "settings.json"
    assert load_settings().spreadsheet_id == "x"


def test_token_lives_next_to_settings(tmp_path) -> None:
    oauth = oauth_config_from_env(tmp_path / "settings.json")
    assert oauth.token_path == tmp_path / "token.json"
    assert oauth.client_secret is None
    assert oauth.redirect_uri.endswith("/api/auth/callback")


def test_extraction_config_defaults_and_overrides(monkeypatch) -> None:
    assert extraction_config_from_env().model == DEFAULT_GEMINI_MODEL
    monkeypatch.setenv("COACH_ADVICE_LANGUAGE", "English")
    monkeypatch.setenv("COACH_HTTP_TIMEOUT", "15")
    cfg = extraction_config_from_env()
    assert cfg.language == "English"
    assert cfg.timeout_s == 15
