# tests/test_config.py
"""Test configuration loading"""

import pytest

from spot_reshuffle.core.config import DEFAULT_REDIRECT_URI, check_credentials, load_config
from spot_reshuffle.core.exceptions import ConfigError


def write_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadConfig:
    """Test load_config()"""

    def test_credentials_from_file(self, clean_env, tmp_path):
        path = write_config(tmp_path, (
            "spotify:\n"
            "  client_id: file_id\n"
            "  client_secret: file_secret\n"
        ))

        config = load_config(path)

        assert config.spotify.client_id == "file_id"
        assert config.spotify.client_secret == "file_secret"
        assert config.spotify.redirect_uri == DEFAULT_REDIRECT_URI
        assert config.spotify.cache_path is None
        assert config.reshuffle.market == "US"
        assert config.reshuffle.batch_size == 100
        assert config.reshuffle.search_limit == 50
        assert config.logging.directory is None

    def test_environment_overrides_file(self, clean_env, tmp_path):
        clean_env.setenv("SPOTIPY_CLIENT_ID", "env_id")
        clean_env.setenv("SPOTIPY_CLIENT_SECRET", "env_secret")
        clean_env.setenv("SPOTIPY_REDIRECT_URI", "http://127.0.0.1:9999/cb")
        path = write_config(tmp_path, "spotify:\n  client_id: file_id\n  client_secret: file_secret\n")

        config = load_config(path)

        assert config.spotify.client_id == "env_id"
        assert config.spotify.client_secret == "env_secret"
        assert config.spotify.redirect_uri == "http://127.0.0.1:9999/cb"

    def test_implicit_file_is_optional(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("SPOTIPY_CLIENT_ID", "env_id")
        clean_env.setenv("SPOTIPY_CLIENT_SECRET", "env_secret")

        config = load_config()

        assert config.spotify.client_id == "env_id"
        assert config.reshuffle.source_playlists == ()

    def test_explicit_missing_file(self, clean_env, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_missing_credentials(self, clean_env, tmp_path):
        path = write_config(tmp_path, "spotify:\n  client_id: file_id\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert exc_info.value.details["field"] == "spotify.client_secret"

    def test_credentials_checked_later(self, clean_env, tmp_path):
        path = write_config(tmp_path, "reshuffle:\n  include_liked: true\n")

        config = load_config(path, require_credentials=False)

        assert config.spotify.client_id == ""
        assert config.reshuffle.include_liked is True
        with pytest.raises(ConfigError) as exc_info:
            check_credentials(config.spotify)
        assert exc_info.value.details["field"] == "spotify.client_id"

    def test_reshuffle_section(self, clean_env, tmp_path):
        clean_env.setenv("SPOTIPY_CLIENT_ID", "id")
        clean_env.setenv("SPOTIPY_CLIENT_SECRET", "secret")
        path = write_config(tmp_path, (
            "reshuffle:\n"
            "  target_playlist: Reshuffle\n"
            "  source_playlists:\n"
            "    - abc\n"
            "    - ' def '\n"
            "  include_liked: true\n"
            "  market: it\n"
            "  batch_size: 50\n"
            "  search_limit: 20\n"
            "logging:\n"
            f"  directory: {tmp_path / 'logs'}\n"
        ))

        config = load_config(path)

        assert config.reshuffle.target_playlist == "Reshuffle"
        assert config.reshuffle.source_playlists == ("abc", "def")
        assert config.reshuffle.include_liked is True
        assert config.reshuffle.market == "IT"
        assert config.reshuffle.batch_size == 50
        assert config.reshuffle.search_limit == 20
        assert config.logging.directory == (tmp_path / "logs").resolve()

    def test_single_source_as_string(self, clean_env, tmp_path):
        clean_env.setenv("SPOTIPY_CLIENT_ID", "id")
        clean_env.setenv("SPOTIPY_CLIENT_SECRET", "secret")
        path = write_config(tmp_path, "reshuffle:\n  source_playlists: abc\n  market: null\n")

        config = load_config(path)

        assert config.reshuffle.source_playlists == ("abc",)
        assert config.reshuffle.market is None

    @pytest.mark.parametrize("content", [
        "spotify: [not, a, dict]\n",
        "reshuffle:\n  batch_size: 101\n",
        "reshuffle:\n  batch_size: 0\n",
        "reshuffle:\n  batch_size: true\n",
        "reshuffle:\n  search_limit: 51\n",
        "reshuffle:\n  market: USA\n",
        "reshuffle:\n  market: u1\n",
        "reshuffle:\n  include_liked: 'yes'\n",
        "reshuffle:\n  source_playlists: {a: b}\n",
        "- just\n- a list\n",
        "spotify: {client_id: [unclosed\n",
    ])
    def test_invalid_values(self, clean_env, tmp_path, content):
        clean_env.setenv("SPOTIPY_CLIENT_ID", "id")
        clean_env.setenv("SPOTIPY_CLIENT_SECRET", "secret")
        path = write_config(tmp_path, content)

        with pytest.raises(ConfigError):
            load_config(path)

    def test_empty_file(self, clean_env, tmp_path):
        clean_env.setenv("SPOTIPY_CLIENT_ID", "id")
        clean_env.setenv("SPOTIPY_CLIENT_SECRET", "secret")

        config = load_config(write_config(tmp_path, ""))

        assert config.reshuffle.include_liked is False
