import pytest

from snipsync.config.settings import Settings, expand_path, get_config_path, load_settings, save_settings
from snipsync.exceptions import ConfigError
from snipsync.snippet.store import SnippetStore


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "config.toml")

    assert settings == Settings()
    assert settings.general.sort_by == "recency"
    assert settings.general.backend == "gist"


def test_save_and_load(tmp_path):
    path = tmp_path / "sub" / "config.toml"
    settings = Settings()
    settings.general.snippet_dirs = ["~/snippets"]
    settings.general.sort_by = "-command"
    settings.gitlab.snippet_id = "12"

    save_settings(settings, path)

    assert load_settings(path) == settings


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[general]\nsort_by = "command"\ncolumn = 40\n\n[extra]\nx = 1\n')

    settings = load_settings(path)

    assert settings.general.sort_by == "command"


def test_unknown_backend(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[general]\nbackend = "bitbucket"\n')

    with pytest.raises(ConfigError):
        load_settings(path)


def test_malformed_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general\n")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_expand_path(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("SNIP_DIR", "snips")

    assert expand_path("~/$SNIP_DIR/a.toml") == tmp_path / "snips" / "a.toml"


def test_config_path_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("SNIPSYNC_CONFIG", str(tmp_path / "custom.toml"))

    assert get_config_path() == tmp_path / "custom.toml"


def test_store_from_settings(tmp_path):
    settings = Settings()
    settings.general.snippet_file = str(tmp_path / "snippet.toml")
    settings.general.snippet_dirs = [str(tmp_path / "dir")]
    settings.general.sort_by = "description"

    store = SnippetStore.from_settings(settings)

    assert store.snippet_file == tmp_path / "snippet.toml"
    assert store.snippet_dirs == [tmp_path / "dir"]
    assert store.sort_by == "description"
    assert store.extension == ".toml"


def test_snippet_extension_setting(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[general]\nsnippet_extension = ".snip"\neditor = "vim"\n')

    settings = load_settings(path)

    assert settings.general.snippet_extension == ".snip"
    assert not hasattr(settings.general, "editor")
    assert SnippetStore.from_settings(settings).extension == ".snip"
