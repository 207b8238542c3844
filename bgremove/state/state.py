"""
Application state for an interactive background remover.

The front end keeps a single immutable :class:`AppState` and replaces it with
``reduce(state, action)`` for every event (file picked, removal started,
result or failure received). :func:`run_removal` drives one complete removal
through that cycle. The connection string is never stored in the state: it is
parsed into credentials for the duration of one call only.

Example usage:
    >>> state = AppState()
    >>> state = reduce(state, FileSelected(load_image("cat.png")))
    >>> state = asyncio.run(run_removal(state, connection_string))
    >>> state.processed_url or state.error
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

import httpx

from bgremove.credentials import parse_connection_string
from bgremove.errors import BackgroundRemovalError, DownloadError
from bgremove.uploader import ImageFile, remove_background
from bgremove.utils.config import RemoverConfig
from bgremove.utils.logging import get_logger

logger = get_logger(__name__)

MISSING_INPUT_MESSAGE = "Please upload an image and provide your Cloudinary Secret URL."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


@dataclass(frozen=True)
class AppState:
    """
    Snapshot of the front end.

    Attributes:
        image: Currently selected image
        processed_url: URL of the background-removed image
        is_loading: Whether a removal is in flight
        error: Message to display, if any
    """

    image: Optional[ImageFile] = None
    processed_url: Optional[str] = None
    is_loading: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class FileSelected:
    image: ImageFile


@dataclass(frozen=True)
class RemovalRequested:
    has_connection_string: bool


@dataclass(frozen=True)
class RemovalSucceeded:
    url: str


@dataclass(frozen=True)
class RemovalFailed:
    message: Optional[str] = None


@dataclass(frozen=True)
class DownloadFailed:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[FileSelected, RemovalRequested, RemovalSucceeded, RemovalFailed, DownloadFailed, Reset]


def reduce(state: AppState, action: Action) -> AppState:
    """
    Apply an action to a state.

    Args:
        state: Current state
        action: Event to apply

    Returns:
        New state (the input state is never modified)

    Raises:
        TypeError: If the action type is unknown
    """
    if isinstance(action, FileSelected):
        return replace(state, image=action.image, processed_url=None, error=None)

    if isinstance(action, RemovalRequested):
        if state.image is None or not action.has_connection_string:
            return replace(state, error=MISSING_INPUT_MESSAGE)
        return replace(state, is_loading=True, processed_url=None, error=None)

    if isinstance(action, RemovalSucceeded):
        return replace(state, is_loading=False, processed_url=action.url, error=None)

    if isinstance(action, RemovalFailed):
        return replace(state, is_loading=False, error=action.message or UNKNOWN_ERROR_MESSAGE)

    if isinstance(action, DownloadFailed):
        return replace(state, error=DownloadError().message)

    if isinstance(action, Reset):
        return AppState()

    raise TypeError(f"Unknown action: {type(action).__name__}")


def can_remove(state: AppState, has_connection_string: bool) -> bool:
    """Whether a removal may be started from this state."""
    return state.image is not None and has_connection_string and not state.is_loading


def can_download(state: AppState) -> bool:
    """Whether a processed image is ready to be downloaded."""
    return state.processed_url is not None and not state.is_loading


async def run_removal(
    state: AppState,
    connection_string: Optional[str],
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RemoverConfig] = None,
) -> AppState:
    """
    Drive one background removal through the reducer.

    Args:
        state: State holding the selected image
        connection_string: Cloudinary connection string for this call only
        client: Optional shared HTTP client
        config: Endpoint and timeout settings

    Returns:
        Settled state: either ``processed_url`` or ``error`` is set and
        ``is_loading`` is False
    """
    state = reduce(state, RemovalRequested(has_connection_string=bool(connection_string)))
    if not state.is_loading:
        return state

    try:
        credentials = parse_connection_string(connection_string)
        url = await remove_background(state.image, credentials, client=client, config=config)
    except BackgroundRemovalError as e:
        logger.error(f"Background removal failed ({e.kind.value}): {e.message}")
        return reduce(state, RemovalFailed(e.message))

    return reduce(state, RemovalSucceeded(url))
