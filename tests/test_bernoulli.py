import threading
from math import comb

import numpy as np
import pytest
import sympy

from hardyz.bernoulli import BernoulliCache, bernoulli, binomial


def test_binomial_edges():
    for n in range(0, 12):
        assert binomial(n, 0) == 1
        assert binomial(n, n) == 1
        assert binomial(n, -1) == 0
        assert binomial(n, n + 1) == 0


def test_binomial_symmetry_and_values():
    for n in range(1, 30):
        for k in range(n + 1):
            assert binomial(n, k) == pytest.approx(binomial(n, n - k), rel=1e-14)
            assert binomial(n, k) == pytest.approx(comb(n, k), rel=1e-12)


def test_binomial_large_n_stays_finite():
    # 200! overflows a double; the running product does not
    assert np.isfinite(binomial(200, 100))
    assert binomial(200, 100) == pytest.approx(float(comb(200, 100)), rel=1e-10)


def test_reference_values():
    assert bernoulli(0) == 1.0
    assert bernoulli(1) == -0.5
    assert bernoulli(2) == pytest.approx(1 / 6, abs=1e-15)
    assert bernoulli(3) == pytest.approx(0.0, abs=1e-15)
    assert bernoulli(4) == pytest.approx(-1 / 30, abs=1e-15)


def test_odd_entries_vanish():
    for n in range(3, 16, 2):
        assert bernoulli(n) == pytest.approx(0.0, abs=1e-9)


def test_even_entries_match_sympy():
    for n in range(0, 15, 2):
        assert bernoulli(n) == pytest.approx(float(sympy.bernoulli(n)), rel=1e-8)


def test_requery_is_bit_identical():
    a = bernoulli(10)
    b = bernoulli(10)
    assert a == b
    assert np.asarray(a).tobytes() == np.asarray(b).tobytes()


def test_negative_index_rejected():
    with pytest.raises(ValueError):
        bernoulli(-1)
    with pytest.raises(ValueError):
        BernoulliCache().get(2.0)


def test_cache_grows_in_order():
    cache = BernoulliCache()
    assert len(cache) == 1
    cache.get(6)
    assert len(cache) == 7
    cache.get(3)
    assert len(cache) == 7
    assert cache.values()[0] == 1.0


def test_cache_dtype():
    cache = BernoulliCache(np.float32)
    assert isinstance(cache.get(4), np.float32)
    assert cache.get(4) == pytest.approx(-1 / 30, rel=1e-5)


def test_concurrent_growth_matches_sequential():
    expected = BernoulliCache()
    expected.get(40)

    cache = BernoulliCache()
    barrier = threading.Barrier(8)
    errors = []

    def worker(n):
        try:
            barrier.wait()
            cache.get(n)
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in (40, 5, 33, 17, 40, 2, 28, 11)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert not errors
    assert cache.values() == expected.values()


def test_float_cache_tracks_sympy():
    assert bernoulli(12) == pytest.approx(-691 / 2730, rel=1e-9)
    for n in range(2, 13):
        assert bernoulli(n) == pytest.approx(float(sympy.bernoulli(n)), rel=1e-9, abs=1e-12)
