"""
Playlist writing module for spot-reshuffle.

    - TargetReconciler: finds or creates the target playlist and empties it
    - BatchWriter: appends tracks in batches of at most 100

Usage:
    from spot_reshuffle.playlist import BatchWriter, TargetReconciler

    target = TargetReconciler().reconcile("Reshuffle")
    BatchWriter().write(target.playlist.id, uris)
"""

from spot_reshuffle.playlist.target import (
    DEFAULT_DESCRIPTION,
    ReconciledTarget,
    TargetReconciler,
    TargetState,
)
from spot_reshuffle.playlist.writer import BatchWriter

__all__ = [
    "DEFAULT_DESCRIPTION",
    "ReconciledTarget",
    "TargetReconciler",
    "TargetState",
    "BatchWriter",
]
