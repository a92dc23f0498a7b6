from chromalens.infrastructure.cache import ResultCache, digest


def test_result_cache_eviction_limit():
    cache = ResultCache(ttl=60, max_entries=16)

    for idx in range(20):
        cache.put(f"key-{idx}", {"value": idx})

    assert len(cache) == 16
    assert cache.get("key-0") is None
    assert cache.get("key-3") is None
    assert cache.get("key-4") == {"value": 4}


def test_result_cache_expires_entries():
    cache = ResultCache(ttl=-1, max_entries=4)

    cache.put("key", "value")

    assert cache.get("key") is None


def test_overwriting_a_key_does_not_evict():
    cache = ResultCache(ttl=60, max_entries=2)
    cache.put("a", 1)
    cache.put("b", 2)

    cache.put("a", 3)

    assert cache.get("a") == 3
    assert cache.get("b") == 2


def test_digest_is_stable():
    assert digest(b"abc") == digest(b"abc")
    assert digest(b"abc") != digest(b"abd")
