import gc
import weakref

import pytest

from nanoraft.events import EventDispatcher


class Recorder:
    def __init__(self, log, name="r"):
        self.log = log
        self.name = name

    def on_closed(self, sender):
        self.log.append((self.name, "closed", sender))

    def on_connected(self, sender):
        self.log.append((self.name, "connected", sender))

    def on_data_ready(self, sender, payload):
        self.log.append((self.name, "data", sender, payload))


def test_each_event_reaches_its_handlers():
    rec = Recorder([])
    events = EventDispatcher()
    events.add_close_handler(rec)
    events.add_connect_handler(rec)
    events.add_data_ready_handler(rec)
    events.on_connected("s1")
    events.on_data_ready("s1", b"abc")
    events.on_closed("s1")
    assert rec.log == [("r", "connected", "s1"), ("r", "data", "s1", b"abc"), ("r", "closed", "s1")]


def test_handlers_called_in_registration_order():
    shared = []
    first, second = Recorder(shared, "a"), Recorder(shared, "b")
    events = EventDispatcher()
    events.add_connect_handler(first)
    events.add_connect_handler(second)
    events.on_connected("s")
    assert [entry[0] for entry in first.log] == ["a", "b"]


def test_handler_only_sees_registered_kind():
    rec = Recorder([])
    events = EventDispatcher()
    events.add_close_handler(rec)
    events.on_connected("s")
    events.on_data_ready("s", b"x")
    assert rec.log == []


def test_expired_reference_is_refused():
    rec = Recorder([])
    ref = weakref.ref(rec)
    del rec
    gc.collect()
    events = EventDispatcher()
    with pytest.raises(RuntimeError):
        events.add_close_handler(ref)


def test_collected_handler_is_dropped():
    shared = []
    keep = Recorder(shared, "keep")
    gone = Recorder(shared, "gone")
    events = EventDispatcher()
    events.add_close_handler(gone)
    events.add_close_handler(keep)
    del gone
    gc.collect()
    events.on_closed("s")
    assert keep.log == [("keep", "closed", "s")]