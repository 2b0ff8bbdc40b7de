"""Bounded queues routing items between two groups of threads."""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from queue import Empty, Full, Queue
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")


class Waker(Protocol):
    """Anything that can wake the event loop owning a receiving queue."""

    def wake(self) -> None:
        """Wake the receiver; raise OSError on failure."""


class QueueFull(Exception):
    """Raised when an item could not be queued; `item` is handed back."""

    def __init__(self, item: Any) -> None:
        super().__init__("queue is full")
        self.item = item


@dataclass(frozen=True)
class TrackedItem(Generic[T]):
    """An item together with the id of the queue that sent it."""

    sender: int
    inner: T

    def into_inner(self) -> T:
        """Return the wrapped item."""
        return self.inner


class _WakingSender:
    """Sending end of one bounded queue, remembering whether to wake it."""

    __slots__ = ("queue", "waker", "needs_wake")

    def __init__(self, queue: Queue, waker: Waker) -> None:
        self.queue = queue
        self.waker = waker
        self.needs_wake = False

    def clone(self) -> _WakingSender:
        return _WakingSender(self.queue, self.waker)

    def try_send(self, item: Any) -> bool:
        try:
            self.queue.put_nowait(item)
        except Full:
            return False
        self.needs_wake = True
        return True

    def wake(self) -> None:
        if self.needs_wake:
            self.waker.wake()
            self.needs_wake = False


class Queues:
    """One endpoint of a set of bidirectional queues.

    Each endpoint receives on its own queue and can send to a specific
    endpoint on the other side, to a random one, or to all of them. Items
    are wrapped with the sender's id so a reply can be routed back.
    """

    def __init__(self, senders: list[_WakingSender], receiver: Queue, id: int) -> None:
        self._senders = senders
        self._receiver = receiver
        self._id = id
        self._rng = random.Random()

    @property
    def id(self) -> int:
        """The index of this endpoint among its side."""
        return self._id

    @staticmethod
    def pair(
        a_wakers: Sequence[Waker],
        b_wakers: Sequence[Waker],
        capacity: int,
    ) -> tuple[list[Queues], list[Queues]]:
        """Create the endpoints for side a and side b.

        One endpoint is created per waker, in the order the wakers are
        given. `capacity` bounds the number of pending items per endpoint.
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        a_wakers = list(a_wakers)
        b_wakers = list(b_wakers)
        if bool(a_wakers) != bool(b_wakers):
            raise ValueError("both sides need at least one waker")

        a_tx: list[_WakingSender] = []
        b_rx: list[Queue] = []
        for waker in b_wakers:
            q: Queue = Queue(maxsize=capacity)
            a_tx.append(_WakingSender(q, waker))
            b_rx.append(q)

        b_tx: list[_WakingSender] = []
        a_rx: list[Queue] = []
        for waker in a_wakers:
            q = Queue(maxsize=capacity)
            b_tx.append(_WakingSender(q, waker))
            a_rx.append(q)

        a = [
            Queues([s.clone() for s in a_tx], receiver, index)
            for index, receiver in enumerate(a_rx)
        ]
        b = [
            Queues([s.clone() for s in b_tx], receiver, index)
            for index, receiver in enumerate(b_rx)
        ]
        return a, b

    def try_recv(self) -> TrackedItem | None:
        """Return the next pending item, or None if there is none."""
        try:
            return self._receiver.get_nowait()
        except Empty:
            return None

    def try_recv_all(self) -> list[TrackedItem]:
        """Return every item pending at the time of the call."""
        items = []
        for _ in range(self._receiver.qsize()):
            item = self.try_recv()
            if item is not None:
                items.append(item)
        return items

    def try_send_to(self, id: int, item: Any) -> None:
        """Send `item` to the endpoint `id` on the other side."""
        if not self._senders[id].try_send(TrackedItem(self._id, item)):
            raise QueueFull(item)

    def try_send_any(self, item: Any) -> None:
        """Send `item` to an endpoint on the other side chosen uniformly."""
        target = self._rng.randrange(len(self._senders))
        if not self._senders[target].try_send(TrackedItem(self._id, item)):
            raise QueueFull(item)

    def try_send_all(self, item: Any) -> None:
        """Send `item` to every endpoint on the other side.

        Every endpoint is tried; QueueFull is raised if any of them was full.
        """
        failed = False
        for sender in self._senders:
            if not sender.try_send(TrackedItem(self._id, item)):
                failed = True
        if failed:
            raise QueueFull(item)

    def wake(self) -> None:
        """Wake every receiver sent to since the last wake.

        All receivers are tried; the last error raised is re-raised.
        """
        error: OSError | None = None
        for sender in self._senders:
            try:
                sender.wake()
            except OSError as exc:
                error = exc
        if error is not None:
            raise error