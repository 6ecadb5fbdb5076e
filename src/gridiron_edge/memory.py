"""Process-wide profile memory bounded by entry count and serialized size.

Known limitation: the store lives in process memory only. A restart clears
every profile; nothing is persisted.
"""

from __future__ import annotations

import copy
import json
import logging
import re
import threading
from collections import OrderedDict
from collections.abc import Mapping

from gridiron_edge.common.types import JsonDict
from gridiron_edge.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def approx_size(value: object) -> int:
    """Compact JSON byte length of ``value``; unserializable values count as 0."""
    try:
        return len(json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    except (TypeError, ValueError):
        return 0


class ProfileMemory:
    """LRU store keyed by profile id.

    ``get`` and ``set`` both mark the key most recently used. After every
    write, least recently used keys are evicted one at a time until both the
    entry-count and byte bounds hold; a single oversized write can evict
    itself. A single lock guards the map, the size index and the LRU order.
    """

    def __init__(self, max_profiles: int = 100, max_bytes: int = 1_000_000) -> None:
        self.max_profiles = max_profiles
        self.max_bytes = max_bytes
        self._entries: OrderedDict[str, JsonDict] = OrderedDict()
        self._sizes: dict[str, int] = {}
        self._total_bytes = 0
        self._lock = threading.Lock()

    def get(self, key: str | None = None) -> JsonDict:
        key = key or DEFAULT_PROFILE
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                return {}
            self._entries.move_to_end(key)
            return copy.deepcopy(value)

    def set(self, key: str | None, value: object) -> JsonDict:
        key = key or DEFAULT_PROFILE
        stored: JsonDict = copy.deepcopy(dict(value)) if isinstance(value, Mapping) else {}
        size = approx_size(stored)

        with self._lock:
            self._total_bytes -= self._sizes.get(key, 0)
            self._entries[key] = stored
            self._entries.move_to_end(key)
            self._sizes[key] = size
            self._total_bytes += size
            self._evict()

        return copy.deepcopy(stored)

    def _evict(self) -> None:
        while self._entries and (
            len(self._entries) > self.max_profiles or self._total_bytes > self.max_bytes
        ):
            oldest, _ = self._entries.popitem(last=False)
            self._total_bytes -= self._sizes.pop(oldest, 0)
            logger.debug("Evicted profile %r from memory", oldest)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


_memory: ProfileMemory | None = None
_memory_lock = threading.Lock()


def _shared() -> ProfileMemory:
    global _memory
    with _memory_lock:
        if _memory is None:
            settings = get_settings()
            _memory = ProfileMemory(settings.memory_max_profiles, settings.memory_max_bytes)
        return _memory


def get_memory(profile: str | None = None) -> JsonDict:
    return _shared().get(profile)


def set_memory(profile: str | None, value: object) -> JsonDict:
    return _shared().set(profile, value)


def reset_memory(memory: ProfileMemory | None = None) -> None:
    """Replace the process-wide store (a fresh one from settings if None)."""
    global _memory
    with _memory_lock:
        _memory = memory


def _clean_strings(values: object, limit: int, max_len: int) -> list[str]:
    if not isinstance(values, list):
        return []
    cleaned: list[str] = []
    for item in values:
        if len(cleaned) == limit:
            break
        if not isinstance(item, str):
            continue
        text = _CONTROL_CHARS.sub("", item).strip()[:max_len]
        if text:
            cleaned.append(text)
    return cleaned


def sanitize_memory_for_prompt(memory: Mapping[str, object] | None) -> JsonDict | None:
    """Reduce stored preferences to the fields safe to place in a prompt.

    Keeps up to 10 house rules (160 chars each) and up to 10 preferred angles
    (40 chars each). Returns None when nothing survives.
    """
    if not memory:
        return None
    house_rules = _clean_strings(memory.get("house_rules"), 10, 160)
    angles = _clean_strings(memory.get("angles_preferred"), 10, 40)
    result: JsonDict = {}
    if house_rules:
        result["house_rules"] = house_rules
    if angles:
        result["angles_preferred"] = angles
    return result or None
