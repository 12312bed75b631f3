# tests/test_target.py
"""Test finding, creating and clearing the target playlist"""

from unittest.mock import call

import pytest

from spot_reshuffle.core.exceptions import SpotifyError
from spot_reshuffle.playlist import DEFAULT_DESCRIPTION, TargetReconciler, TargetState
from spot_reshuffle.spotify.models import SearchResult, SearchResultKind


class TestTargetLookup:
    """Test ownership and name matching"""

    def test_owned_exact_match_is_reused(self, mock_client, make_playlist, make_search_result):
        mock_client.search_playlists.return_value = make_search_result(
            make_playlist("other", "Reshuffle", owner_id="someone_else"),
            make_playlist("mine", "Reshuffle"),
        )

        reconciler = TargetReconciler(mock_client)
        target = reconciler.reconcile("Reshuffle")

        assert target.playlist.id == "mine"
        assert target.created is False
        assert reconciler.state is TargetState.READY
        mock_client.create_playlist.assert_not_called()
        mock_client.search_playlists.assert_called_once_with("Reshuffle", limit=50, offset=0)

    def test_found_playlist_logs_its_size(self, mock_client, make_playlist, make_search_result, caplog):
        found = make_playlist("mine", "Reshuffle")
        found["tracks"] = {"total": 7}
        mock_client.search_playlists.return_value = make_search_result(found)
        mock_client.playlist.side_effect = lambda playlist_id: found

        with caplog.at_level("INFO", logger="spot_reshuffle.playlist.target"):
            TargetReconciler(mock_client).reconcile("Reshuffle")

        assert "Found existing playlist: 'Reshuffle' (7 tracks)" in caplog.text

    def test_foreign_playlist_with_same_name_is_never_selected(self, mock_client, make_playlist, make_search_result):
        mock_client.search_playlists.return_value = make_search_result(
            make_playlist("other", "Reshuffle", owner_id="someone_else"),
        )

        target = TargetReconciler(mock_client).reconcile("Reshuffle")

        assert target.created is True
        mock_client.iter_playlist_items.assert_not_called()
        mock_client.remove_all_occurrences.assert_not_called()

    @pytest.mark.parametrize("candidate_name", ["reshuffle", "Reshuffle ", "Reshuffle 2"])
    def test_name_must_match_exactly(self, mock_client, make_playlist, make_search_result, candidate_name):
        mock_client.search_playlists.return_value = make_search_result(
            make_playlist("mine", candidate_name),
        )

        target = TargetReconciler(mock_client).reconcile("Reshuffle")

        assert target.created is True

    def test_first_match_wins(self, mock_client, make_playlist, make_search_result):
        mock_client.search_playlists.return_value = make_search_result(
            make_playlist("first", "Reshuffle"),
            make_playlist("second", "Reshuffle"),
        )

        target = TargetReconciler(mock_client).reconcile("Reshuffle")

        assert target.playlist.id == "first"

    def test_non_playlist_search_result_means_not_found(self, mock_client):
        mock_client.search_playlists.return_value = SearchResult(kind=SearchResultKind.OTHER)

        target = TargetReconciler(mock_client).reconcile("Reshuffle")

        assert target.created is True

    def test_missing_target_is_created_private(self, mock_client):
        reconciler = TargetReconciler(mock_client, search_limit=10)
        target = reconciler.reconcile("Reshuffle")

        mock_client.search_playlists.assert_called_once_with("Reshuffle", limit=10, offset=0)
        mock_client.create_playlist.assert_called_once_with(
            "me",
            "Reshuffle",
            public=False,
            collaborative=False,
            description=DEFAULT_DESCRIPTION
        )
        assert target.playlist.id == "new_playlist"
        assert target.playlist.name == "Reshuffle"
        assert target.removed == 0
        assert reconciler.state is TargetState.READY

    def test_search_failure_propagates(self, mock_client):
        mock_client.search_playlists.side_effect = SpotifyError("Rate limited", is_rate_limit=True)

        with pytest.raises(SpotifyError):
            TargetReconciler(mock_client).reconcile("Reshuffle")
        mock_client.create_playlist.assert_not_called()


class TestTargetClearing:
    """Test emptying an existing target"""

    def test_clears_in_batches_of_at_most_100(self, mock_client, make_item, make_playlist, make_search_result):
        existing = [make_item(f"spotify:track:t{n}") for n in range(250)]
        mock_client.search_playlists.return_value = make_search_result(make_playlist("mine", "Reshuffle"))
        mock_client.iter_playlist_items.side_effect = lambda pid, market=None: iter(existing)

        target = TargetReconciler(mock_client).reconcile("Reshuffle")

        batches = [c.args[1] for c in mock_client.remove_all_occurrences.call_args_list]
        assert [len(b) for b in batches] == [100, 100, 50]
        assert batches[0][0] == "spotify:track:t0"
        assert batches[2][-1] == "spotify:track:t249"
        assert all(c.args[0] == "mine" for c in mock_client.remove_all_occurrences.call_args_list)
        assert target.removed == 250

    def test_empty_playlist_sends_no_request(self, mock_client, make_playlist, make_search_result):
        mock_client.search_playlists.return_value = make_search_result(make_playlist("mine", "Reshuffle"))

        target = TargetReconciler(mock_client).reconcile("Reshuffle")

        mock_client.remove_all_occurrences.assert_not_called()
        assert target.removed == 0

    def test_duplicates_and_unavailable_items_in_target(self, mock_client, make_item):
        items = [
            make_item("spotify:track:a"),
            {'track': None},
            make_item("spotify:track:b"),
            make_item("spotify:track:a"),
        ]
        mock_client.iter_playlist_items.side_effect = lambda pid, market=None: iter(items)

        removed = TargetReconciler(mock_client).clear("mine")

        mock_client.iter_playlist_items.assert_called_once_with("mine")
        assert mock_client.remove_all_occurrences.call_args_list == [
            call("mine", ["spotify:track:a", "spotify:track:b"])
        ]
        assert removed == 2

    def test_failed_batch_stops_clearing(self, mock_client, make_item):
        items = [make_item(f"spotify:track:t{n}") for n in range(250)]
        mock_client.iter_playlist_items.side_effect = lambda pid, market=None: iter(items)
        mock_client.remove_all_occurrences.side_effect = [None, SpotifyError("Failed removing"), None]

        with pytest.raises(SpotifyError):
            TargetReconciler(mock_client).clear("mine")
        assert mock_client.remove_all_occurrences.call_count == 2
