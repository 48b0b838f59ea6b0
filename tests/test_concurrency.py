"""Multi-threaded behaviour of LiveStore.

Covers: disjoint groups never contend, overlapping group writers
eventually contend, and readers never observe a counter going
backwards while a single writer increments it.
"""

import threading
import time

from livekv import KeyGroup, LiveStore, LockContention

N_THREADS = 8
ROUNDS = 200


def run_threads(targets, timeout=30.0):
    threads = [threading.Thread(target=t) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=timeout)
    assert not any(t.is_alive() for t in threads)


class TestDisjointGroups:
    def test_no_contention(self):
        s = LiveStore()
        errors = []

        def worker(i):
            group = KeyGroup(f"w{i}.a", f"w{i}.b")

            def writer(props):
                props.set_int(f"w{i}.a", (props.get_int(f"w{i}.a") or 0) + 1)
                props.set_int(f"w{i}.b", (props.get_int(f"w{i}.b") or 0) + 1)

            def run():
                try:
                    for _ in range(ROUNDS):
                        s.set_group(group, writer)
                except LockContention as exc:
                    errors.append(exc)
            return run

        run_threads([worker(i) for i in range(N_THREADS)])
        assert errors == []
        for i in range(N_THREADS):
            assert s.get_int(f"w{i}.a") == ROUNDS
            assert s.get_int(f"w{i}.b") == ROUNDS


class TestOverlappingGroups:
    def test_contention_is_reported(self):
        s = LiveStore()
        inside = threading.Event()
        release = threading.Event()
        failures = []

        def slow_writer(props):
            props.set("shared", "slow")
            inside.set()
            release.wait(timeout=5.0)

        def first():
            s.set_group(KeyGroup("a", "shared"), slow_writer)

        def second():
            inside.wait(timeout=5.0)
            try:
                s.set_group(KeyGroup("shared", "b"), lambda props: props.set("shared", "fast"))
            except LockContention as exc:
                failures.append(exc)
            finally:
                release.set()

        run_threads([first, second])
        assert len(failures) == 1
        assert failures[0].keys == ("shared", "b")
        assert s.get("shared") == "slow"

    def test_hammering_eventually_contends(self):
        s = LiveStore()
        left, right = KeyGroup("x", "y"), KeyGroup("y", "z")
        contended = threading.Event()
        deadline = time.monotonic() + 10.0

        def touch(props):
            props.set("y", "busy")
            time.sleep(0.001)

        def hammer(group):
            def run():
                while not contended.is_set() and time.monotonic() < deadline:
                    try:
                        s.set_group(group, touch)
                    except LockContention:
                        contended.set()
            return run

        run_threads([hammer(left), hammer(right)])
        assert contended.is_set()


class TestReadersAndWriter:
    def test_counter_never_goes_backwards(self):
        s = LiveStore()
        s.set_int("counter", 0)
        target = 200
        done = threading.Event()
        regressions = []

        def writer():
            try:
                value = 0
                while value < target:
                    try:
                        s.update("counter", lambda raw: str(int(raw) + 1))
                    except LockContention:
                        time.sleep(0)
                        continue
                    value += 1
            finally:
                done.set()

        def reader():
            last = -1
            while not done.is_set():
                value = s.get_int("counter")
                if value < last:
                    regressions.append((last, value))
                last = value
                time.sleep(0)

        run_threads([writer] + [reader] * 63, timeout=60.0)
        assert regressions == []
        assert s.get_int("counter") == target
