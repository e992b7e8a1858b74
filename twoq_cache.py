"""2Q replacement cache.

Keys seen once live in the ``recent`` segment (insertion ordered). When a key
falls off the back of ``recent`` only its key is remembered in ``ghost``; if it
is inserted again while still remembered it goes straight to ``frequent``,
which is kept in LRU order. A scan of one-time keys therefore only churns
``recent`` and ``ghost`` and never touches the popular keys in ``frequent``.

Lookups compare keys with ``==`` only, so keys do not need to be hashable.
"""
import operator
from collections import deque
from enum import Enum

_MISSING = object()


class StaleEntryError(RuntimeError):
    """An entry view was used after it was consumed or the cache changed."""


class SlotKind(Enum):
    FREQUENT = "frequent"
    RECENT = "recent"
    GHOST = "ghost"
    UNKNOWN = "unknown"


class CacheSlot:
    __slots__ = ("key", "value")

    def __init__(self, key, value):
        self.key = key
        self.value = value

    def __repr__(self):
        return f"CacheSlot({self.key!r}, {self.value!r})"


def _position(segment, key):
    for i, slot in enumerate(segment):
        if slot.key == key:
            return i
    return -1


class TwoQCache:
    """Bounded key-value cache with recent / frequent / ghost segments.

    The front (left end) of every segment is the newest element, the back
    (right end) is the next eviction victim.

    Not thread-safe. An entry view returned by :meth:`entry` or
    :meth:`peek_entry` must be used before any other operation on the cache;
    a view that outlives a structural change raises :class:`StaleEntryError`.
    """

    def __init__(self, size: int):
        size = operator.index(size)
        if size < 1:
            raise ValueError(f"cache size must be > 0, got {size}")
        self.capacity = size
        self.max_recent = max(1, size // 4)
        self.max_frequent = size - self.max_recent
        self.max_ghost = size // 2

        self.recent = deque()    # CacheSlot, newest insertion first
        self.frequent = deque()  # CacheSlot, MRU first
        self.ghost = deque()     # bare keys, most recently evicted first

        # Bumped on every structural change; entry views and iterators
        # compare against it.
        self._mutations = 0

    # ---- read operations -------------------------------------------------

    def contains(self, key) -> bool:
        return _position(self.recent, key) >= 0 or _position(self.frequent, key) >= 0

    __contains__ = contains

    def peek(self, key, default=None):
        """Return the value for `key` without changing any ordering."""
        for segment in (self.recent, self.frequent):
            i = _position(segment, key)
            if i >= 0:
                return segment[i].value
        return default

    def get(self, key, default=None):
        """Return the value for `key`, moving a frequent hit to the front.

        Hits in ``recent`` are returned as-is: ``recent`` is ordered by
        insertion only, and promotion into ``frequent`` happens solely
        through the ghost list.
        """
        i = _position(self.recent, key)
        if i >= 0:
            return self.recent[i].value
        i = _position(self.frequent, key)
        if i >= 0:
            return self._promote(i).value
        return default

    def get_mut(self, key, default=None):
        """Like :meth:`get`; the stored object is returned for in-place edits."""
        return self.get(key, default)

    def __getitem__(self, key):
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __len__(self):
        return len(self.recent) + len(self.frequent)

    def is_empty(self) -> bool:
        return not self.recent and not self.frequent

    def items(self):
        """Restartable view over ``(key, value)`` pairs, recent then frequent."""
        return CacheItems(self)

    def keys(self):
        for key, _ in self._iter_items():
            yield key

    def values(self):
        for _, value in self._iter_items():
            yield value

    def __iter__(self):
        return self.keys()

    def _iter_items(self):
        mutations = self._mutations
        for segment in (self.recent, self.frequent):
            for slot in segment:
                if self._mutations != mutations:
                    raise RuntimeError("TwoQCache mutated during iteration")
                yield slot.key, slot.value

    # ---- mutation --------------------------------------------------------

    def insert(self, key, value):
        """Insert or update `key`; return the previous value or None."""
        entry = self.entry(key)
        if entry.occupied:
            return entry.insert(value)
        entry.insert(value)
        return None

    def __setitem__(self, key, value):
        self.insert(key, value)

    def entry(self, key):
        """Classify `key` and return a view on its slot.

        A hit in ``frequent`` is promoted to the front first, so going
        through ``entry`` counts as an access just like :meth:`get`.
        """
        kind, index = self._classify(key)
        if kind is SlotKind.FREQUENT:
            self._promote(index)
            index = 0
        return self._view(key, kind, index)

    def peek_entry(self, key):
        """Classify `key` and return a view on its slot, without reordering."""
        kind, index = self._classify(key)
        return self._view(key, kind, index)

    def remove(self, key, default=None):
        """Remove `key` and return its value. Never records it in ``ghost``."""
        for segment in (self.recent, self.frequent):
            i = _position(segment, key)
            if i >= 0:
                slot = segment[i]
                del segment[i]
                self._mutations += 1
                return slot.value
        return default

    def __delitem__(self, key):
        if self.remove(key, _MISSING) is _MISSING:
            raise KeyError(key)

    def clear(self):
        self.recent.clear()
        self.frequent.clear()
        self.ghost.clear()
        self._mutations += 1

    # ---- policy ----------------------------------------------------------

    def _classify(self, key):
        i = _position(self.frequent, key)
        if i >= 0:
            return SlotKind.FREQUENT, i
        i = _position(self.recent, key)
        if i >= 0:
            return SlotKind.RECENT, i
        for i, ghost_key in enumerate(self.ghost):
            if ghost_key == key:
                return SlotKind.GHOST, i
        return SlotKind.UNKNOWN, None

    def _view(self, key, kind, index):
        if kind is SlotKind.FREQUENT or kind is SlotKind.RECENT:
            return OccupiedEntry(self, kind, index)
        return VacantEntry(self, key, kind, index)

    def _promote(self, index):
        slot = self.frequent[index]
        if index:
            del self.frequent[index]
            self.frequent.appendleft(slot)
            self._mutations += 1
        return slot

    def _insert_vacant(self, key, kind, index, value):
        slot = CacheSlot(key, value)
        if kind is SlotKind.GHOST:
            # Second touch inside the ghost window: straight to frequent.
            # Whatever frequent drops is gone for good.
            del self.ghost[index]
            if len(self.frequent) + 1 > self.max_frequent:
                self.frequent.pop()
            self.frequent.appendleft(slot)
        else:
            if len(self.recent) + 1 > self.max_recent:
                self._remember(self.recent.pop().key)
            self.recent.appendleft(slot)
        self._mutations += 1
        return value

    def _remember(self, key):
        # max_ghost is 0 for a size-1 cache; nothing is remembered then.
        if not self.max_ghost:
            return
        if len(self.ghost) + 1 > self.max_ghost:
            self.ghost.pop()
        self.ghost.appendleft(key)

    def __repr__(self):
        pairs = ", ".join(f"{k!r}: {v!r}" for k, v in self._iter_items())
        return f"{type(self).__name__}({self.capacity}, {{{pairs}}})"


class CacheItems:
    """Iterable over a cache's live pairs; every ``iter()`` starts over."""

    def __init__(self, cache):
        self._cache = cache

    def __iter__(self):
        return self._cache._iter_items()

    def __len__(self):
        return len(self._cache)

    def __repr__(self):
        return f"CacheItems({list(self)!r})"


class _EntryView:
    occupied = False

    def __init__(self, cache, kind, index):
        self._cache = cache
        self._kind = kind
        self._index = index
        self._mutations = cache._mutations

    def _checked_cache(self):
        cache = self._cache
        if cache is None:
            raise StaleEntryError("entry view has already been consumed")
        if cache._mutations != self._mutations:
            raise StaleEntryError("cache was modified while the entry view was alive")
        return cache


class OccupiedEntry(_EntryView):
    """View on a live slot in ``recent`` or ``frequent``."""

    occupied = True

    def _segment(self):
        cache = self._checked_cache()
        return cache.frequent if self._kind is SlotKind.FREQUENT else cache.recent

    def _slot(self):
        return self._segment()[self._index]

    @property
    def kind(self):
        return self._kind.value

    def key(self):
        return self._slot().key

    def get(self):
        return self._slot().value

    def get_mut(self):
        return self._slot().value

    def into_mut(self):
        value = self._slot().value
        self._cache = None
        return value

    def insert(self, value):
        """Replace the value in place and return the old one."""
        slot = self._slot()
        old, slot.value = slot.value, value
        return old

    def remove_entry(self):
        segment = self._segment()
        slot = segment[self._index]
        del segment[self._index]
        self._cache._mutations += 1
        self._cache = None
        return slot.key, slot.value

    def remove(self):
        return self.remove_entry()[1]

    def or_insert(self, default):
        return self.into_mut()

    def or_insert_with(self, factory):
        return self.into_mut()

    def __repr__(self):
        try:
            slot = self._slot()
        except StaleEntryError:
            return "OccupiedEntry(<stale>)"
        return f"OccupiedEntry(key={slot.key!r}, value={slot.value!r}, kind={self.kind!r})"


class VacantEntry(_EntryView):
    """View on a key with no live slot; :meth:`insert` applies the 2Q policy."""

    def __init__(self, cache, key, kind, index):
        super().__init__(cache, kind, index)
        self._key = key

    @property
    def remembered(self):
        """True when the key is still in the ghost list."""
        return self._kind is SlotKind.GHOST

    def key(self):
        return self._key

    def into_key(self):
        self._checked_cache()
        self._cache = None
        return self._key

    def insert(self, value):
        cache = self._checked_cache()
        self._cache = None
        return cache._insert_vacant(self._key, self._kind, self._index, value)

    def or_insert(self, default):
        return self.insert(default)

    def or_insert_with(self, factory):
        self._checked_cache()
        return self.insert(factory())

    def __repr__(self):
        return f"VacantEntry(key={self._key!r}, remembered={self.remembered!r})"
