"""Tests for ListenerRegistry and change detection."""

import logging

from livekv import ChangeEvent, KeyGroup, ListenerRegistry, Memory
from livekv.kv.views import Overlay
from livekv.listeners import changed


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, change):
        self.events.append(change)


class TestChanged:
    def test_detects_differences(self):
        before = {"a": "1", "b": None, "c": "3"}
        after = {"a": "1", "b": "2", "c": None}
        assert changed(before, after) == {
            "b": ChangeEvent(None, "2"),
            "c": ChangeEvent("3", None),
        }

    def test_nothing_changed(self):
        assert changed({"a": "1"}, {"a": "1"}) == {}


class TestRegistration:
    def test_key_registration_is_a_set(self):
        reg = ListenerRegistry()
        rec = Recorder()
        reg.register_key("a", rec)
        reg.register_key("a", rec)
        assert reg.key_listeners("a") == [rec]
        assert reg.key_listeners("b") == []
        assert len(reg) == 1

    def test_group_registration_fans_out(self):
        reg = ListenerRegistry()
        rec = Recorder()
        g = KeyGroup("a", "b")
        reg.register_group(g, rec)
        assert list(reg.group_listeners(["a"])) == [rec]
        assert list(reg.group_listeners(["b"])) == [rec]
        assert reg.group_listeners(["c"]) == {}

    def test_union_over_keys(self):
        reg = ListenerRegistry()
        one, two = Recorder(), Recorder()
        reg.register_group(KeyGroup("a"), one)
        reg.register_group(KeyGroup("b"), two)
        assert set(reg.group_listeners(["a", "b"])) == {one, two}
        assert len(reg) == 2


class TestDispatch:
    def test_no_changes_notifies_nobody(self):
        reg = ListenerRegistry()
        rec = Recorder()
        reg.register_key("a", rec)
        backend = Memory()
        assert reg.dispatch({}, backend, backend) == 0
        assert rec.events == []

    def test_key_listener_gets_raw_change(self):
        reg = ListenerRegistry()
        rec = Recorder()
        reg.register_key("a", rec)
        after = Memory({"a": "2"})
        count = reg.dispatch({"a": ChangeEvent("1", "2")}, Overlay({"a": "1"}, after), after)
        assert count == 1
        assert rec.events == [ChangeEvent("1", "2")]

    def test_group_listener_reads_before_and_after(self):
        reg = ListenerRegistry()
        rec = Recorder()
        reg.register_group(KeyGroup("a", "b"), rec, lambda props: props.get_int("a", 0) + props.get_int("b", 0))
        after = Memory({"a": "5", "b": "1"})
        before = Overlay({"a": "2"}, after)
        reg.dispatch({"a": ChangeEvent("2", "5")}, before, after)
        assert rec.events == [ChangeEvent(3, 6)]

    def test_group_before_key_and_once_each(self):
        reg = ListenerRegistry()
        order = []
        both = lambda change: order.append(("both", change))
        key_only = lambda change: order.append(("key", change))
        reg.register_key("a", key_only)
        reg.register_key("a", both)
        reg.register_group(KeyGroup("a"), both)
        after = Memory({"a": "x"})
        count = reg.dispatch({"a": ChangeEvent(None, "x")}, Overlay({"a": None}, after), after)
        assert count == 2
        assert order == [
            ("both", ChangeEvent({"a": None}, {"a": "x"})),
            ("key", ChangeEvent(None, "x")),
        ]

    def test_latest_group_registration_wins(self):
        reg = ListenerRegistry()
        rec = Recorder()
        g = KeyGroup("a")
        reg.register_group(g, rec)
        reg.register_group(g, rec, lambda props: props.get("a"))
        after = Memory({"a": "x"})
        reg.dispatch({"a": ChangeEvent(None, "x")}, Overlay({"a": None}, after), after)
        assert rec.events == [ChangeEvent(None, "x")]

    def test_failure_is_logged_and_others_still_run(self, caplog):
        reg = ListenerRegistry()
        rec = Recorder()

        def broken(change):
            raise ValueError("nope")

        reg.register_key("a", broken)
        reg.register_key("a", rec)
        after = Memory({"a": "x"})
        with caplog.at_level(logging.ERROR, logger="livekv.listeners"):
            count = reg.dispatch({"a": ChangeEvent(None, "x")}, Overlay({"a": None}, after), after)
        assert count == 2
        assert rec.events == [ChangeEvent(None, "x")]
        assert "failed" in caplog.text

    def test_dispatch_keys_leaves_group_listeners_alone(self):
        reg = ListenerRegistry()
        group_rec, key_rec = Recorder(), Recorder()
        reg.register_group(KeyGroup("a", "b"), group_rec)
        reg.register_key("a", key_rec)
        assert reg.dispatch_keys({"a": ChangeEvent(None, "x")}) == 1
        assert group_rec.events == []
        assert key_rec.events == [ChangeEvent(None, "x")]
