import numpy as np
import pytest

from hardyz.config import EngineConfig
from hardyz.scan import boundary_zeros, nonzero_edges, plan_jobs, refine_zero, scan, sign_changes
from hardyz.types import Method

KNOWN_ZEROS = np.array([
    14.134725141734693, 21.022039638771555, 25.010857580145689, 30.424876125859513,
    32.935061587739189, 37.586178158825671, 40.918719012147495, 43.327073280914999,
    48.005150881167159, 49.773832477672302,
])


def test_sign_changes_skips_exact_zeros():
    ts = np.arange(6, dtype=float)
    zs = np.array([1.0, 0.0, -2.0, -1.0, 0.0, 0.0])
    assert sign_changes(ts, zs) == [(0.0, 2.0)]


def test_sign_changes_shape_mismatch():
    with pytest.raises(ValueError):
        sign_changes(np.arange(3), np.arange(4))


def test_refine_zero_bisection():
    root = refine_zero(lambda x: x * x - 2.0, 1.0, 2.0, tol=1e-12)
    assert root == pytest.approx(np.sqrt(2.0), abs=1e-11)


def test_refine_zero_requires_bracket():
    with pytest.raises(ValueError):
        refine_zero(lambda x: x * x + 1.0, -1.0, 1.0)


def test_plan_jobs_covers_range():
    cfg = EngineConfig(chunk_length=10.0, points_per_unit=4)
    jobs = plan_jobs(10.0, 35.0, cfg)
    assert [j.start_t for j in jobs] == [10.0, 20.0, 30.0]
    assert [j.length for j in jobs] == [10.0, 10.0, 5.0]
    assert [j.points for j in jobs] == [41, 41, 21]
    assert all(j.method == "euler-maclaurin" for j in jobs)
    with pytest.raises(ValueError):
        plan_jobs(5.0, 5.0, cfg)


def test_scan_finds_first_ten_zeros():
    result = scan(10.0, 50.0, EngineConfig(max_workers=1))
    assert result.method is Method.EULER_MACLAURIN
    assert result.count == len(KNOWN_ZEROS)
    assert np.allclose(result.zeros, KNOWN_ZEROS, atol=1e-3)
    assert sum(result.chunk_counts) >= result.count


def test_scan_parallel_matches_sequential():
    cfg = EngineConfig(chunk_length=5.0, max_workers=1)
    seq = scan(12.0, 32.0, cfg)
    par = scan(12.0, 32.0, EngineConfig(chunk_length=5.0, max_workers=2))
    assert np.allclose(seq.zeros, par.zeros, atol=1e-9)


def test_scan_odlyzko_schonhage_above_degenerate_range():
    result = scan(100.0, 110.0, EngineConfig(method="os"))
    assert result.count > 0
    assert all(100.0 <= z <= 110.0 for z in result.zeros)


def test_config_validation():
    with pytest.raises(ValueError):
        EngineConfig(chunk_length=0)
    with pytest.raises(ValueError):
        EngineConfig(max_workers=0)
    with pytest.raises(ValueError):
        EngineConfig(dtype="int8")
    with pytest.raises(ValueError):
        EngineConfig(method="trapezoid")
    cfg = EngineConfig(method="rs", dtype="float32")
    assert cfg.method is Method.RIEMANN_SIEGEL
    assert cfg.evaluator().dtype == np.dtype(np.float32)
    assert cfg.points_per_chunk == 101


def test_presets():
    assert EngineConfig.quick().method is Method.RIEMANN_SIEGEL
    assert EngineConfig.default().dtype == "float64"
    assert EngineConfig.high_precision().dtype == np.dtype(np.longdouble).name


def test_refine_zero_absolute_tolerance_at_large_t():
    root = refine_zero(lambda x: x - 1000.123456789, 1000.0, 1001.0, tol=1e-9)
    assert root == pytest.approx(1000.123456789, abs=1e-8)


def test_refine_zero_endpoint_root():
    assert refine_zero(lambda x: x - 3.0, 3.0, 4.0) == 3.0


def test_nonzero_edges():
    ts = np.arange(5, dtype=float)
    assert nonzero_edges(ts, np.array([0.0, 2.0, -1.0, 3.0, 0.0])) == ((1.0, 2.0), (3.0, 3.0))
    assert nonzero_edges(ts, np.zeros(5)) == (None, None)


def test_zero_on_chunk_boundary_is_reported():
    cfg = EngineConfig(chunk_length=2.0, points_per_unit=1)
    jobs = plan_jobs(0.0, 6.0, cfg)
    edges = {}
    for job, zs in zip(jobs, ([1.0, 2.0, 0.0], [0.0, -1.0, -2.0], [-1.0, -3.0, -2.0])):
        ts = job.block.samples()
        assert sign_changes(ts, np.array(zs)) == []
        edges[job.index] = nonzero_edges(ts, np.array(zs))
    assert boundary_zeros(jobs, edges) == [2.0]


def test_plan_jobs_uses_config_sample_count():
    cfg = EngineConfig(chunk_length=3.0, points_per_unit=7)
    jobs = plan_jobs(0.0, 4.0, cfg)
    assert jobs[0].points == cfg.points_per_chunk == cfg.points_for(3.0)
    assert jobs[1].points == cfg.points_for(1.0) == 8
