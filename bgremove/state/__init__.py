"""
Application state and reducer for interactive front ends.
"""

from .state import (
    Action,
    AppState,
    DownloadFailed,
    FileSelected,
    RemovalFailed,
    RemovalRequested,
    RemovalSucceeded,
    Reset,
    can_download,
    can_remove,
    reduce,
    run_removal,
)

__all__ = [
    "Action",
    "AppState",
    "DownloadFailed",
    "FileSelected",
    "RemovalFailed",
    "RemovalRequested",
    "RemovalSucceeded",
    "Reset",
    "can_download",
    "can_remove",
    "reduce",
    "run_removal",
]
