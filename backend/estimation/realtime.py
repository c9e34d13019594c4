"""Per-room broadcast channels for pushing room state to every connected session."""

import asyncio
import logging

logger = logging.getLogger(__name__)

LAG_LOG_EVERY = 100  # one warning per this many drops on a lagging subscriber


class Subscription:
    """One receiver on a BroadcastChannel.

    Sees only messages published after it was created. Buffers at most
    ``capacity`` messages; when a slow reader falls further behind, the
    oldest buffered message is dropped.
    """

    def __init__(self, channel: "BroadcastChannel", capacity: int) -> None:
        self._channel = channel
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=capacity)
        self.lagged = 0
        self.closed = False

    def _deliver(self, message: str) -> None:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self._queue.get_nowait()
            self._queue.put_nowait(message)
            self.lagged += 1
            if self.lagged == 1 or self.lagged % LAG_LOG_EVERY == 0:
                logger.warning(
                    "Subscriber on room %s lagging, dropped oldest message (%d dropped so far)",
                    self._channel.name, self.lagged,
                )

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def recv(self) -> str:
        """Wait for the next message, in publish order."""
        return await self._queue.get()

    def close(self) -> None:
        """Detach from the channel. Safe to call more than once."""
        if not self.closed:
            self.closed = True
            self._channel._unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BroadcastChannel:
    """Fan-out of text messages to every current subscriber of one room."""

    def __init__(self, capacity: int = 100, name: str = "") -> None:
        if capacity < 1:
            raise ValueError(f"broadcast capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register a new receiver. Earlier messages are not replayed."""
        sub = Subscription(self, self.capacity)
        self._subscribers.add(sub)
        logger.debug("Room %s: subscriber added (total: %d)", self.name, len(self._subscribers))
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        self._subscribers.discard(sub)
        logger.debug("Room %s: subscriber removed (remaining: %d)", self.name, len(self._subscribers))

    def publish(self, message: str) -> int:
        """Push a message to all subscribers without blocking.

        Returns the number of subscribers it was delivered to; with nobody
        listening the message is simply dropped.
        """
        for sub in list(self._subscribers):
            sub._deliver(message)
        return len(self._subscribers)
