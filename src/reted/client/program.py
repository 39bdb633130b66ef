"""Front-end runtime.

Owns the navigator model, feeds it messages one at a time from a queue and
performs the commands it returns. Fetches run as asyncio tasks against the
ReTed service and enqueue their result message when done; message
processing never waits for them.
"""

import asyncio
import logging
from typing import Any

import httpx

from reted.client import navigator
from reted.client.messages import (
    Fetch,
    FetchError,
    LocationChanged,
    PushUrl,
    ReplaceUrl,
    SetTitle,
)
from reted.client.views import view

logger = logging.getLogger(__name__)


class Program:
    """Single-session front end driven by an asyncio message queue."""

    def __init__(self, client: httpx.AsyncClient, location: str = "/") -> None:
        """Initialize the program at a starting location.

        Args:
            client: HTTP client with ``base_url`` set to the ReTed service
            location: Starting URL location
        """
        self._client = client
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._tasks: set[asyncio.Task[None]] = set()
        self.model = navigator.initial_model()
        self.history: list[str] = [location]
        self.title = ""
        # Synthetic route change to the starting location
        self._queue.put_nowait(LocationChanged(location))

    @property
    def location(self) -> str:
        return self.history[-1]

    def dispatch(self, msg: Any) -> None:
        """Enqueue a message for processing."""
        self._queue.put_nowait(msg)

    def visit(self, location: str) -> None:
        """User navigation: push a history entry and change location."""
        self.history.append(location)
        self.dispatch(LocationChanged(location))

    def go_back(self) -> bool:
        """Browser back: return to the previous history entry.

        Returns:
            False if there is no previous entry
        """
        if len(self.history) < 2:
            return False
        self.history.pop()
        self.dispatch(LocationChanged(self.history[-1]))
        return True

    def render(self) -> str:
        return view(self.model)

    async def run_until_idle(self) -> None:
        """Process messages until the queue is empty and no fetch is running."""
        while True:
            while not self._queue.empty():
                self._step(self._queue.get_nowait())
            if not self._tasks:
                return
            await asyncio.wait(self._tasks, return_when=asyncio.FIRST_COMPLETED)

    async def close(self) -> None:
        """Cancel outstanding fetches."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    def _step(self, msg: Any) -> None:
        self.model, commands = navigator.update(msg, self.model)
        for command in commands:
            self._perform(command)

    def _perform(self, command: Any) -> None:
        if isinstance(command, Fetch):
            task = asyncio.create_task(self._fetch(command))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif isinstance(command, PushUrl):
            self.history.append(command.url)
            self.dispatch(LocationChanged(command.url))
        elif isinstance(command, ReplaceUrl):
            self.history[-1] = command.url
            self.dispatch(LocationChanged(command.url))
        elif isinstance(command, SetTitle):
            self.title = command.title
        else:
            raise TypeError(f"Unknown command: {command!r}")

    async def _fetch(self, command: Fetch) -> None:
        # Every fetch reports back, otherwise the navigator never settles
        try:
            result = await fetch_json(self._client, command)
        except Exception as e:
            logger.error(f"Fetch of {command.path} failed unexpectedly: {e!r}")
            result = FetchError(None, f"Unexpected error: {e}")
        self.dispatch(command.to_msg(result))


async def fetch_json(client: httpx.AsyncClient, command: Fetch) -> Any:
    """Perform a Fetch command.

    Returns:
        The decoded value, or a FetchError for transport, status and
        decoding failures
    """
    logger.debug(f"GET {command.path} {command.params}")
    try:
        response = await client.get(command.path, params=command.params)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Request to {command.path} failed: {e}")
        return FetchError(None, str(e))

    if response.status_code >= 400:
        return FetchError(response.status_code, response.reason_phrase)

    try:
        return command.decode(response.json())
    except (ValueError, KeyError, TypeError) as e:
        # DecodeError, JSON syntax errors and payloads of the wrong shape
        logger.warning(f"Could not decode {command.path}: {e}")
        return FetchError(None, f"Invalid response: {e}")
