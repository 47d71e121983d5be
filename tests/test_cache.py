"""
最大截面缓存的单元测试
"""

import threading

import pytest

from kinegen import CacheKey, InteractionContext, MaxXSecCache, energy_bin, make_cache_key


def _key(i, process="dis"):
    return CacheKey(process=process, target="nucleon", energy_bin=float(i))


class TestRingEviction:
    """测试环形缓冲淘汰策略"""

    def test_oldest_insertion_evicted(self):
        """测试超出容量时淘汰最早插入的条目"""
        cache = MaxXSecCache(capacity=3)
        for i in range(4):
            cache.store(_key(i), float(i + 1))

        assert len(cache) == 3
        assert cache.lookup(_key(0)) is None
        assert [cache.lookup(_key(i)) for i in (1, 2, 3)] == [2.0, 3.0, 4.0]
        assert cache.statistics()['evictions'] == 1

    def test_reads_do_not_protect_entries(self):
        """测试读取不会延长条目寿命（不是 LRU）"""
        cache = MaxXSecCache(capacity=3)
        for i in range(3):
            cache.store(_key(i), 1.0)
        assert cache.lookup(_key(0)) == 1.0

        cache.store(_key(3), 1.0)
        assert _key(0) not in cache
        assert _key(1) in cache

    def test_overwrite_counts_as_fresh_insertion(self):
        """测试覆盖已有键视为新插入"""
        cache = MaxXSecCache(capacity=3)
        for name in (0, 1, 2):
            cache.store(_key(name), 1.0)
        cache.store(_key(0), 5.0)
        cache.store(_key(3), 1.0)

        assert cache.lookup(_key(0)) == 5.0
        assert _key(1) not in cache
        assert len(cache) == 3

    def test_overwrite_replaces_entry(self):
        """测试覆盖生成新的条目对象"""
        cache = MaxXSecCache()
        first = cache.store(_key(1), 1.0, energy=5.0)
        second = cache.store(_key(1), 2.0, energy=5.0)

        assert second.serial > first.serial
        assert first.max_xsec == 1.0
        assert cache.entry(_key(1)) is second


class TestLookup:
    """测试查询与统计"""

    def test_hit_and_miss_counters(self):
        """测试命中与未命中计数"""
        cache = MaxXSecCache()
        assert cache.lookup(_key(1)) is None
        cache.store(_key(1), 3.0)
        assert cache.lookup(_key(1)) == 3.0

        stats = cache.statistics()
        assert stats['hits'] == 1
        assert stats['misses'] == 1
        assert stats['stores'] == 1
        assert stats['size'] == 1

    def test_entry_does_not_touch_statistics(self):
        """测试 entry() 不影响命中统计"""
        cache = MaxXSecCache()
        cache.store(_key(1), 3.0)
        assert cache.entry(_key(1)).max_xsec == 3.0
        assert cache.entry(_key(2)) is None

        stats = cache.statistics()
        assert stats['hits'] == 0
        assert stats['misses'] == 0

    def test_clear(self):
        """测试清空缓存"""
        cache = MaxXSecCache()
        cache.store(_key(1), 3.0)
        cache.clear()
        assert len(cache) == 0

    def test_raise_only_never_lowers(self):
        """测试只增写入不会降低已有最大值"""
        cache = MaxXSecCache()
        cache.store(_key(1), 5.0)

        assert cache.store(_key(1), 1.0, raise_only=True).max_xsec == 5.0
        assert cache.store(_key(1), 7.0, raise_only=True).max_xsec == 7.0
        assert cache.store(_key(2), 3.0, raise_only=True).max_xsec == 3.0
        assert cache.store(_key(1), 1.0).max_xsec == 1.0
        assert cache.lookup(_key(1)) == 1.0

    def test_zero_maximum_is_cached(self):
        """测试零最大值同样被缓存"""
        cache = MaxXSecCache()
        cache.store(_key(1), 0.0)
        assert cache.lookup(_key(1)) == 0.0


class TestInvalidInput:
    """测试非法输入"""

    @pytest.mark.parametrize("value", [-1.0, float('nan'), float('inf')])
    def test_invalid_values_rejected(self, value):
        """测试负数与非有限值被拒绝"""
        cache = MaxXSecCache()
        with pytest.raises(ValueError):
            cache.store(_key(1), value)
        assert len(cache) == 0

    def test_invalid_capacity(self):
        """测试容量必须为正"""
        with pytest.raises(ValueError):
            MaxXSecCache(capacity=0)


class TestEnergyBuckets:
    """测试能量分桶"""

    def test_nearby_energies_share_bucket(self):
        """测试相近能量落入同一能量桶"""
        assert energy_bin(5.0) == energy_bin(5.001)

    def test_distant_energies_differ(self):
        """测试相距较远的能量落入不同能量桶"""
        assert energy_bin(5.0) != energy_bin(5.2)

    def test_zero_fraction_is_exact(self):
        """测试分桶宽度为零时按能量精确匹配"""
        assert energy_bin(5.0, 0.0) == 5.0
        assert energy_bin(5.0, 0.0) != energy_bin(5.001, 0.0)

    def test_invalid_energy(self):
        """测试非正能量报错"""
        with pytest.raises(ValueError):
            energy_bin(0.0)

    def test_key_distinguishes_process_and_target(self):
        """测试缓存键区分过程与靶"""
        a = make_cache_key(InteractionContext(probe_energy=5.0, process="dis"))
        b = make_cache_key(InteractionContext(probe_energy=5.0, process="qel"))
        c = make_cache_key(InteractionContext(probe_energy=5.0, process="dis", target="O16"))
        assert len({a, b, c}) == 3

    def test_key_distinguishes_sampler_fingerprint(self):
        """测试缓存键区分抽样器配置"""
        context = InteractionContext(probe_energy=5.0, process="dis")
        plain = make_cache_key(context)
        cut = make_cache_key(context, fingerprint=("dis", (("Q2", (2.0, 5.0)),)))
        assert plain != cut
        assert cut == make_cache_key(context, fingerprint=["dis", (("Q2", (2.0, 5.0)),)])


class TestConcurrency:
    """测试并发写入"""

    def test_concurrent_stores(self):
        """测试多线程写入后容量与计数一致"""
        cache = MaxXSecCache(capacity=50)
        n_threads, per_thread = 8, 100

        def writer(t):
            for i in range(per_thread):
                cache.store(_key(t * per_thread + i), float(i))
                cache.lookup(_key(t * per_thread))

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(n_threads)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = cache.statistics()
        assert len(cache) == 50
        assert stats['stores'] == n_threads * per_thread
        assert stats['evictions'] == n_threads * per_thread - 50
