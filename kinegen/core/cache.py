"""
Bounded cache of maximum differential cross-sections.

Entries are keyed by process, target and a relative energy bucket. The cache
behaves like a circular buffer: once ``capacity`` entries are held, storing a
new one evicts the oldest insertion, regardless of how recently it was read.
Writers are serialized by a lock and publish a fresh snapshot of the entry
table; readers only dereference the current snapshot and never block.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Dict, Optional, Tuple

from .. import config
from .data_classes import CacheEntry, CacheKey, InteractionContext

logger = logging.getLogger(__name__)


def energy_bin(energy: float, fraction: float = config.ENERGY_BUCKET_FRACTION) -> float:
    """Map an energy onto its bucket index.

    Buckets are ``fraction`` wide in relative terms: the index is
    ``floor(ln(E) / ln(1 + fraction))``. With ``fraction == 0`` the energy
    itself is returned, so only identical energies share an entry.
    """
    if not math.isfinite(energy) or energy <= 0.0:
        raise ValueError(f"Energy must be positive and finite, got {energy}")
    if fraction <= 0.0:
        return float(energy)
    return float(math.floor(math.log(energy) / math.log1p(fraction)))


def make_cache_key(
    context: InteractionContext,
    energy_bucket_fraction: float = config.ENERGY_BUCKET_FRACTION,
    fingerprint: Tuple[Any, ...] = (),
) -> CacheKey:
    """Cache key of an interaction context.

    ``fingerprint`` separates entries of differently configured samplers
    (see ``RejectionSampler.fingerprint``).
    """
    return CacheKey(
        process=context.process,
        target=context.target,
        energy_bin=energy_bin(context.probe_energy, energy_bucket_fraction),
        sampler=tuple(fingerprint),
    )


class MaxXSecCache:
    """Thread-safe store of safety-inflated maximum cross-sections.

    Parameters
    ----------
    capacity : int
        Maximum number of entries kept.
    """

    def __init__(self, capacity: int = config.MAX_XSEC_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self._capacity = int(capacity)
        # Insertion-ordered; replaced wholesale on every store
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._serial = 0
        self._write_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats = {
            'hits': 0,
            'misses': 0,
            'stores': 0,
            'evictions': 0,
        }

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def lookup(self, key: CacheKey) -> Optional[float]:
        """Return the cached maximum for ``key`` or None on a miss."""
        entry = self._entries.get(key)
        with self._stats_lock:
            self._stats['hits' if entry is not None else 'misses'] += 1
        return None if entry is None else entry.max_xsec

    def entry(self, key: CacheKey) -> Optional[CacheEntry]:
        """Full cache entry for ``key`` (does not touch the hit statistics)."""
        return self._entries.get(key)

    def store(self, key: CacheKey, value: float, energy: Optional[float] = None,
              raise_only: bool = False) -> CacheEntry:
        """Insert or replace the maximum for ``key``.

        Replacing an existing key counts as a fresh insertion. When the cache
        is over capacity the oldest insertion is evicted. With ``raise_only``
        the stored value is never lowered: a value below the current entry is
        replaced by that entry's maximum.
        """
        value = float(value)
        if not math.isfinite(value) or value < 0.0:
            raise ValueError(f"Cached maximum must be finite and non-negative, got {value}")

        with self._write_lock:
            current = self._entries.get(key)
            if raise_only and current is not None:
                value = max(value, current.max_xsec)
            self._serial += 1
            new_entry = CacheEntry(key=key, max_xsec=value, serial=self._serial, energy=energy)

            entries = dict(self._entries)
            entries.pop(key, None)
            entries[key] = new_entry
            evicted = 0
            while len(entries) > self._capacity:
                oldest = next(iter(entries))
                del entries[oldest]
                evicted += 1
            self._entries = entries

        with self._stats_lock:
            self._stats['stores'] += 1
            self._stats['evictions'] += evicted

        logger.debug("Cached max xsec %.6g for %s (evicted %d)", value, key, evicted)
        return new_entry

    def clear(self) -> None:
        with self._write_lock:
            self._entries = {}

    def statistics(self) -> Dict[str, int]:
        """Snapshot of hit/miss/store/eviction counters plus size and capacity."""
        with self._stats_lock:
            stats = dict(self._stats)
        stats['size'] = len(self._entries)
        stats['capacity'] = self._capacity
        return stats
