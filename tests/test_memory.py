"""Tests for the bounded profile memory."""

from __future__ import annotations

import threading

import pytest

from gridiron_edge import memory as memory_mod
from gridiron_edge.memory import ProfileMemory, approx_size, sanitize_memory_for_prompt


@pytest.fixture(autouse=True)
def fresh_shared_memory():
    memory_mod.reset_memory()
    yield
    memory_mod.reset_memory()


class TestProfileMemory:
    def test_count_bound_evicts_lru(self):
        mem = ProfileMemory(max_profiles=2)
        mem.set("A", {"v": 1})
        mem.set("B", {"v": 2})
        mem.set("C", {"v": 3})
        assert mem.keys() == ["B", "C"]
        assert mem.get("A") == {}

    def test_read_touch_protects_key(self):
        mem = ProfileMemory(max_profiles=2)
        mem.set("A", {"v": 1})
        mem.set("B", {"v": 2})
        assert mem.get("A") == {"v": 1}
        mem.set("C", {"v": 3})
        assert "A" in mem
        assert "B" not in mem
        assert mem.keys() == ["A", "C"]

    def test_byte_bound(self):
        value = {"rules": "x" * 20}
        size = approx_size(value)
        mem = ProfileMemory(max_profiles=10, max_bytes=size * 2)
        mem.set("A", value)
        mem.set("B", value)
        assert len(mem) == 2
        mem.set("C", value)
        assert mem.keys() == ["B", "C"]
        assert mem.total_bytes == size * 2

    def test_oversized_write_evicts_itself(self):
        mem = ProfileMemory(max_profiles=10, max_bytes=5)
        mem.set("big", {"rules": "x" * 50})
        assert len(mem) == 0
        assert mem.total_bytes == 0

    def test_overwrite_recomputes_size(self):
        mem = ProfileMemory()
        mem.set("A", {"v": "x" * 100})
        mem.set("A", {"v": 1})
        assert mem.total_bytes == approx_size({"v": 1})

    def test_non_mapping_becomes_empty(self):
        mem = ProfileMemory()
        assert mem.set("A", ["not", "a", "dict"]) == {}
        assert mem.get("A") == {}
        assert "A" in mem

    def test_default_key(self):
        mem = ProfileMemory()
        mem.set(None, {"v": 1})
        assert mem.get() == {"v": 1}
        assert mem.keys() == ["default"]

    def test_returns_copies(self):
        mem = ProfileMemory()
        stored = mem.set("A", {"list": [1]})
        stored["list"].append(2)
        mem.get("A")["list"].append(3)
        assert mem.get("A") == {"list": [1]}

    def test_unserializable_counts_zero(self):
        assert approx_size({"s": {1, 2}}) == 0

    def test_concurrent_writers_respect_bounds(self):
        mem = ProfileMemory(max_profiles=5)

        def writer(n: int) -> None:
            for i in range(200):
                mem.set(f"{n}-{i}", {"i": i})
                mem.get(f"{n}-{i // 2}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(mem) == 5
        assert mem.total_bytes == sum(approx_size(mem.get(k)) for k in mem.keys())


class TestSharedMemory:
    def test_get_set_round_trip(self):
        memory_mod.set_memory("p1", {"house_rules": ["no overs"]})
        assert memory_mod.get_memory("p1") == {"house_rules": ["no overs"]}
        assert memory_mod.get_memory("p2") == {}

    def test_bounds_from_settings(self, monkeypatch):
        monkeypatch.setenv("MEMORY_MAX_PROFILES", "2")
        memory_mod.reset_memory()
        for key in "ABC":
            memory_mod.set_memory(key, {"k": key})
        assert memory_mod.get_memory("A") == {}
        assert memory_mod.get_memory("C") == {"k": "C"}

    def test_reset_with_instance(self):
        custom = ProfileMemory(max_profiles=1)
        memory_mod.reset_memory(custom)
        memory_mod.set_memory("x", {"a": 1})
        assert custom.get("x") == {"a": 1}


class TestSanitize:
    def test_keeps_allowed_fields(self):
        raw = {
            "house_rules": ["  no player props\x07 ", 42, "x" * 200],
            "angles_preferred": ["weather", ""],
            "secret": "drop me",
        }
        assert sanitize_memory_for_prompt(raw) == {
            "house_rules": ["no player props", "x" * 160],
            "angles_preferred": ["weather"],
        }

    def test_limits_list_length(self):
        raw = {"angles_preferred": [f"a{i}" for i in range(15)]}
        assert len(sanitize_memory_for_prompt(raw)["angles_preferred"]) == 10

    def test_junk_entries_do_not_use_up_the_limit(self):
        raw = {"house_rules": [1] * 10 + ["", "keep"], "angles_preferred": [None] * 12 + ["pace"]}
        assert sanitize_memory_for_prompt(raw) == {"house_rules": ["keep"], "angles_preferred": ["pace"]}

    def test_nothing_survives(self):
        assert sanitize_memory_for_prompt({"other": 1}) is None
        assert sanitize_memory_for_prompt(None) is None
        assert sanitize_memory_for_prompt({}) is None
