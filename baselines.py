from collections import OrderedDict, defaultdict, deque
import heapq

from twoq_cache import TwoQCache


class ReplacementPolicy:
    """Hit/miss counting shared by every policy replayed over a trace."""
    name = None

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self.capacity = capacity
        self.hits = 0
        self.misses = 0

    def process_request(self, key) -> bool:
        raise NotImplementedError

    def _record(self, hit):
        if hit:
            self.hits += 1
        else:
            self.misses += 1
        return hit

    def get_hit_rate(self):
        total = self.hits + self.misses
        return (self.hits / total) * 100 if total > 0 else 0


class LRUCache(ReplacementPolicy):
    name = "LRU"

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.cache = OrderedDict()

    def process_request(self, key):
        if key in self.cache:
            self.cache.move_to_end(key)
            return self._record(True)
        if len(self.cache) >= self.capacity:
            self.cache.popitem(last=False)
        self.cache[key] = True
        return self._record(False)


class FIFOCache(ReplacementPolicy):
    name = "FIFO"

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.cache, self.queue = set(), deque()

    def process_request(self, key):
        if key in self.cache:
            return self._record(True)
        if len(self.cache) >= self.capacity:
            self.cache.remove(self.queue.popleft())
        self.cache.add(key)
        self.queue.append(key)
        return self._record(False)


class LFUCache(ReplacementPolicy):
    """LFU with ties broken by age; stale heap entries are skipped on eviction."""
    name = "LFU"

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.cache = set()
        self.freq = defaultdict(int)
        self.time = 0
        self.heap = []  # (freq, time, key)

    def process_request(self, key):
        self.time += 1
        hit = key in self.cache
        if not hit:
            if len(self.cache) >= self.capacity:
                self._evict()
            self.cache.add(key)
            self.freq[key] = 0
        self.freq[key] += 1
        heapq.heappush(self.heap, (self.freq[key], self.time, key))
        return self._record(hit)

    def _evict(self):
        while self.heap:
            f, _, k = heapq.heappop(self.heap)
            # Only the newest (freq, time) pushed for a key is current
            if k in self.cache and self.freq[k] == f:
                self.cache.remove(k)
                del self.freq[k]
                return


class ARCCache(ReplacementPolicy):
    name = "ARC"

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.p = 0  # target size of t1

        self.t1 = OrderedDict()  # seen once, LRU -> MRU
        self.b1 = OrderedDict()  # ghosts of t1
        self.t2 = OrderedDict()  # seen twice or more
        self.b2 = OrderedDict()  # ghosts of t2

    def process_request(self, key):
        c = self.capacity
        if key in self.t1:
            del self.t1[key]
            self.t2[key] = True
            return self._record(True)
        if key in self.t2:
            self.t2.move_to_end(key)
            return self._record(True)

        if key in self.b1:
            step = 1 if len(self.b1) >= len(self.b2) else len(self.b2) / len(self.b1)
            self.p = min(c, self.p + step)
            self._replace(key)
            del self.b1[key]
            self.t2[key] = True
        elif key in self.b2:
            step = 1 if len(self.b2) >= len(self.b1) else len(self.b1) / len(self.b2)
            self.p = max(0, self.p - step)
            self._replace(key)
            del self.b2[key]
            self.t2[key] = True
        else:
            l1 = len(self.t1) + len(self.b1)
            total = l1 + len(self.t2) + len(self.b2)
            if l1 == c:
                if len(self.t1) < c:
                    self.b1.popitem(last=False)
                    self._replace(key)
                else:
                    self.t1.popitem(last=False)
            elif l1 < c and total >= c:
                if total == 2 * c:
                    self.b2.popitem(last=False)
                self._replace(key)
            self.t1[key] = True
        return self._record(False)

    def _replace(self, key):
        from_t1 = self.t1 and (len(self.t1) > self.p or (key in self.b2 and len(self.t1) == self.p))
        if from_t1 or not self.t2:
            if self.t1:
                k, _ = self.t1.popitem(last=False)
                self.b1[k] = True
        else:
            k, _ = self.t2.popitem(last=False)
            self.b2[k] = True


class TwoQPolicy(ReplacementPolicy):
    """Drives a TwoQCache with bare requests: a miss inserts the key."""
    name = "2Q"

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.cache = TwoQCache(capacity)

    def process_request(self, key):
        entry = self.cache.entry(key)
        if entry.occupied:
            return self._record(True)
        entry.insert(True)
        return self._record(False)


POLICIES = {cls.name: cls for cls in (LRUCache, FIFOCache, LFUCache, ARCCache, TwoQPolicy)}


def make_policy(name, capacity):
    try:
        cls = POLICIES[name]
    except KeyError:
        raise ValueError(f"unknown algorithm {name!r}, expected one of {sorted(POLICIES)}") from None
    return cls(capacity)
