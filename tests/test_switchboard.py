import pytest

from opskit.switchboard import QueueFull, Queues, TrackedItem


class FakeWaker:
    def __init__(self, fail=False):
        self.wakes = 0
        self.fail = fail

    def wake(self):
        if self.fail:
            raise OSError("wake failed")
        self.wakes += 1


def _pair(capacity=1024):
    waker = FakeWaker()
    a, b = Queues.pair([waker], [waker], capacity)
    return a[0], b[0], waker


def _unwrap(item):
    return None if item is None else (item.sender, item.into_inner())


def test_full_queue_returns_item():
    a, b, _ = _pair(capacity=1)
    a.try_send_to(0, "first")
    with pytest.raises(QueueFull) as info:
        a.try_send_to(0, "second")
    assert info.value.item == "second"
    assert _unwrap(b.try_recv()) == (0, "first")


def test_send_all_reaches_every_receiver_and_tags_sender():
    wakers = [FakeWaker() for _ in range(3)]
    a, b = Queues.pair(wakers[:2], wakers, 8)
    assert len(a) == 2
    assert len(b) == 3
    a[1].try_send_all("x")
    for endpoint in b:
        assert endpoint.try_recv() == TrackedItem(1, "x")


def test_send_all_reports_full_after_trying_all():
    wakers = [FakeWaker(), FakeWaker()]
    a, b = Queues.pair([FakeWaker()], wakers, 1)
    a[0].try_send_to(0, "busy")
    with pytest.raises(QueueFull):
        a[0].try_send_all("y")
    assert _unwrap(b[1].try_recv()) == (0, "y")


def test_try_recv_all_drains_pending():
    a, b, _ = _pair()
    for n in range(5):
        a.try_send_to(0, n)
    items = b.try_recv_all()
    assert [item.inner for item in items] == [0, 1, 2, 3, 4]
    assert b.try_recv_all() == []


def test_wake_only_after_send():
    a_waker, b_waker = FakeWaker(), FakeWaker()
    a, b = Queues.pair([a_waker], [b_waker], 4)
    a[0].wake()
    assert b_waker.wakes == 0
    a[0].try_send_to(0, "item")
    a[0].wake()
    a[0].wake()
    assert b_waker.wakes == 1
    assert a_waker.wakes == 0


def test_wake_error_propagates():
    a, _ = Queues.pair([FakeWaker()], [FakeWaker(fail=True)], 4)
    a[0].try_send_to(0, "item")
    with pytest.raises(OSError):
        a[0].wake()


def test_send_any_spreads_items():
    wakers = [FakeWaker() for _ in range(2)]
    a, b = Queues.pair([FakeWaker()], wakers, 1000)
    for n in range(200):
        a[0].try_send_any(n)
    counts = [len(endpoint.try_recv_all()) for endpoint in b]
    assert sum(counts) == 200
    assert all(count > 0 for count in counts)


def test_invalid_configurations():
    with pytest.raises(ValueError):
        Queues.pair([FakeWaker()], [FakeWaker()], 0)
    with pytest.raises(ValueError):
        Queues.pair([FakeWaker()], [], 4)


def test_out_of_range_target():
    a, _, _ = _pair()
    with pytest.raises(IndexError):
        a.try_send_to(5, "nowhere")