# tests/test_pipeline.py
"""Test the end-to-end reshuffle run"""

import pytest

from spot_reshuffle.core.exceptions import ConfigError, SpotifyError
from spot_reshuffle.pipeline import ReshuffleOptions, run_reshuffle


class TestReshuffleOptions:
    """Test option validation"""

    def test_no_source_rejected(self):
        with pytest.raises(ConfigError):
            ReshuffleOptions(target_playlist_name="Reshuffle").validate()

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_target_rejected(self, name):
        with pytest.raises(ConfigError):
            ReshuffleOptions(target_playlist_name=name, include_liked=True).validate()

    @pytest.mark.parametrize("kwargs", [
        {"batch_size": 0},
        {"batch_size": 101},
        {"search_limit": 0},
        {"search_limit": 51},
        {"source_playlists": ("https://open.spotify.com/album/abc",)},
    ])
    def test_out_of_range_rejected(self, kwargs):
        with pytest.raises(ConfigError):
            ReshuffleOptions(target_playlist_name="Reshuffle", include_liked=True, **kwargs).validate()

    def test_valid_options(self):
        options = ReshuffleOptions(target_playlist_name="Reshuffle", source_playlists=("abc",))
        options.validate()
        assert options.sources.playlists == ("abc",)
        assert options.sources.include_liked is False


class TestRunReshuffle:
    """Test run_reshuffle()"""

    def test_config_failure_before_any_remote_call(self, mock_client):
        with pytest.raises(ConfigError):
            run_reshuffle(ReshuffleOptions(target_playlist_name="Reshuffle"), client=mock_client)

        assert mock_client.mock_calls == []

    def test_no_valid_tracks_leaves_target_untouched(self, mock_client, make_item):
        mock_client.iter_saved_tracks.side_effect = lambda market=None: iter([
            make_item("spotify:album:abc"),
            {'track': None},
        ])

        result = run_reshuffle(
            ReshuffleOptions(target_playlist_name="Reshuffle", include_liked=True),
            client=mock_client
        )

        assert result.unique == 0
        assert result.rejected_from_liked == 1
        assert result.playlist_id is None
        mock_client.search_playlists.assert_not_called()
        mock_client.create_playlist.assert_not_called()
        mock_client.add_items.assert_not_called()

    def test_existing_target_is_cleared_then_rewritten(
        self, mock_client, make_item, make_playlist, make_search_result, aggregation_example
    ):
        sources = {'src': [make_item(uri) for uri in aggregation_example]}
        old_items = [make_item("spotify:track:old1"), make_item("spotify:track:old2")]

        def items(playlist_id, market=None):
            return iter(sources.get(playlist_id, old_items))

        mock_client.iter_playlist_items.side_effect = items
        mock_client.search_playlists.return_value = make_search_result(
            make_playlist("target", "Reshuffle", owner_id="someone_else"),
            make_playlist("target", "Reshuffle"),
        )

        result = run_reshuffle(
            ReshuffleOptions(target_playlist_name="Reshuffle", source_playlists=("src",)),
            client=mock_client
        )

        method_names = [c[0] for c in mock_client.mock_calls]
        assert method_names.index("remove_all_occurrences") < method_names.index("add_items")
        mock_client.remove_all_occurrences.assert_called_once_with(
            "target", ["spotify:track:old1", "spotify:track:old2"]
        )
        written = mock_client.add_items.call_args.args[1]
        assert sorted(written) == ["spotify:track:valid1", "spotify:track:valid2", "spotify:track:valid3"]
        mock_client.iter_playlist_items.assert_any_call("src", market="US")
        mock_client.create_playlist.assert_not_called()

        assert result.retrieved == 5
        assert result.rejected_from_playlists == 2
        assert result.unique == 3
        assert result.duplicates_removed == 2
        assert result.removed_from_target == 2
        assert result.written == 3
        assert result.playlist_id == "target"
        assert result.playlist_url == "https://open.spotify.com/playlist/target"
        assert result.created is False

    def test_missing_target_is_created(self, mock_client, make_item):
        mock_client.iter_saved_tracks.side_effect = lambda market=None: iter(
            [make_item(f"spotify:track:id{n}") for n in range(120)]
        )

        result = run_reshuffle(
            ReshuffleOptions(target_playlist_name="New Mix", include_liked=True, market=None, batch_size=50),
            client=mock_client
        )

        mock_client.iter_saved_tracks.assert_called_once_with(market=None)
        assert [len(c.args[1]) for c in mock_client.add_items.call_args_list] == [50, 50, 20]
        assert result.created is True
        assert result.written == 120
        assert result.playlist_id == "new_playlist"

    def test_source_failure_aborts_before_target(self, mock_client):
        mock_client.playlist.side_effect = SpotifyError("Not found while fetching playlist src")

        with pytest.raises(SpotifyError):
            run_reshuffle(
                ReshuffleOptions(target_playlist_name="Reshuffle", source_playlists=("src",)),
                client=mock_client
            )

        mock_client.search_playlists.assert_not_called()
        mock_client.add_items.assert_not_called()
