"""
Zero scanning along the critical line.

- Splits [t_min, t_max] into chunks and samples Z(t) on each as a block.
- Brackets sign changes between consecutive nonzero samples and refines
  each bracket by bisection (mpmath.findroot).
- Chunks run sequentially (max_workers == 1) or on a process pool, with one
  evaluator installed per worker process via the pool initializer.

Samples that are exactly 0 are skipped when bracketing: Riemann–Siegel
returns 0 below t = 8π, which is a sentinel and not a zero of Z. A 0 inside
a chunk is still bracketed by its nonzero neighbours; a 0 on a shared chunk
boundary is picked up by `boundary_zeros` from the chunks' nonzero edges.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional, Set, Tuple

import mpmath
import numpy as np
from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .config import EngineConfig
from .hardy_z import HardyZ
from .logging_config import get_logger
from .types import Bracket, Edges, Method, ScanJob

__all__ = ["ScanResult", "sign_changes", "nonzero_edges", "boundary_zeros", "refine_zero",
           "plan_jobs", "scan_block", "scan"]

log = get_logger(__name__)

# ------------------------------------------------------------------------------
# Per-process evaluator (installed once per worker via pool initializer)
# ------------------------------------------------------------------------------
_EVALUATOR: Optional[HardyZ] = None


def _init_evaluator(dtype: str) -> None:
    global _EVALUATOR
    _EVALUATOR = HardyZ(dtype)


def _evaluator_for(dtype: str) -> HardyZ:
    if _EVALUATOR is None or _EVALUATOR.dtype.name != dtype:
        _init_evaluator(dtype)
    return _EVALUATOR


@dataclass
class ScanResult:
    t_min: float
    t_max: float
    method: Method
    zeros: np.ndarray
    chunk_counts: List[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.zeros)


# ------------------------------ bracketing helpers ------------------------------

def sign_changes(ts: np.ndarray, zs: np.ndarray) -> List[Bracket]:
    """
    Intervals (t_i, t_j) between consecutive nonzero samples of opposite sign.
    """
    ts = np.asarray(ts)
    zs = np.asarray(zs)
    if ts.shape != zs.shape:
        raise ValueError(f"ts and zs must align, got {ts.shape} and {zs.shape}")
    nz = np.flatnonzero(zs != 0)
    out: List[Bracket] = []
    for i, j in zip(nz[:-1], nz[1:]):
        if np.signbit(zs[i]) != np.signbit(zs[j]):
            out.append((float(ts[i]), float(ts[j])))
    return out


def nonzero_edges(ts: np.ndarray, zs: np.ndarray) -> Edges:
    """First and last nonzero (t, Z) samples, or (None, None) if every sample is 0."""
    nz = np.flatnonzero(np.asarray(zs) != 0)
    if len(nz) == 0:
        return None, None
    first, last = nz[0], nz[-1]
    return (float(ts[first]), float(zs[first])), (float(ts[last]), float(zs[last]))


def boundary_zeros(jobs: List[ScanJob], edges: Dict[int, Edges]) -> List[float]:
    """
    Zeros sitting exactly on a shared chunk boundary.

    `sign_changes` skips zero samples, so when the boundary sample is 0 neither
    chunk brackets it. Opposite signs on the two sides mark the boundary itself.
    """
    out: List[float] = []
    for prev, nxt in zip(jobs[:-1], jobs[1:]):
        last = edges[prev.index][1]
        first = edges[nxt.index][0]
        if last is None or first is None:
            continue
        if np.signbit(last[1]) != np.signbit(first[1]) and last[0] < nxt.start_t < first[0]:
            out.append(float(nxt.start_t))
    return out


def refine_zero(f: Callable[[float], float], a: float, b: float,
                tol: float = 1e-9, max_iter: int = 100) -> float:
    """Bisection for a root of `f` in [a, b]; f(a) and f(b) must differ in sign."""
    fa, fb = f(a), f(b)
    if fa == 0:
        return a
    if fb == 0:
        return b
    if np.signbit(fa) == np.signbit(fb):
        raise ValueError(f"[{a}, {b}] does not bracket a root (f(a)={fa}, f(b)={fb})")
    # findroot stops on error < tol * max(1, |x|); scale so `tol` stays absolute
    root = mpmath.findroot(
        lambda x: float(f(float(x))),
        (a, b),
        solver="bisect",
        tol=tol / max(1.0, abs(a), abs(b)),
        maxsteps=max_iter,
        verify=False,
    )
    return float(root)


# -------------------------------- worker logic --------------------------------

def _chunk_function(ev: HardyZ, job: ScanJob) -> Callable[[float], float]:
    """
    Z restricted to one chunk, for refining its brackets.

    Odlyzko–Schönhage takes N from the block start, so refinement evaluates
    inside the same block; the other methods are pointwise already.
    """
    method = Method.parse(job.method)
    if method is Method.ODLYZKO_SCHONHAGE:
        return lambda t: ev.compute_block(job.start_t, t - job.start_t, 2, method)[1]
    return partial(ev.compute, method=method)


def plan_jobs(t_min: float, t_max: float, config: EngineConfig) -> List[ScanJob]:
    """Cover [t_min, t_max] with chunks of `config.chunk_length`; the last may be shorter."""
    if not t_max > t_min:
        raise ValueError(f"t_max must exceed t_min, got [{t_min}, {t_max}]")
    jobs: List[ScanJob] = []
    start = float(t_min)
    i = 0
    while start < t_max:
        length = min(config.chunk_length, t_max - start)
        jobs.append(ScanJob(i, start, length, config.points_for(length),
                            config.method.value, config.dtype))
        i += 1
        start = t_min + i * config.chunk_length
    return jobs


def scan_block(job: ScanJob) -> Tuple[int, List[Bracket], Edges, float, int]:
    """
    Evaluate one chunk and bracket its sign changes.

    Runs in-process or in a pool worker. Returns
    (index, brackets, nonzero edges, elapsed_seconds, pid).
    """
    t0 = time.time()
    ev = _evaluator_for(job.dtype)
    block = job.block
    ts = block.samples(ev.dtype)
    zs = ev.compute_block(job.start_t, job.length, job.points, job.method)
    return job.index, sign_changes(ts, zs), nonzero_edges(ts, zs), time.time() - t0, os.getpid()


def _build_worker_table(stats: Dict[int, Tuple[int, float, float]]) -> Table:
    """Per-worker activity: pid -> (chunks, total seconds, last seconds)."""
    table = Table(title="Workers", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("PID", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Total (s)", justify="right")
    table.add_column("Avg (s)", justify="right")
    table.add_column("Last (s)", justify="right")

    for pid, (count, total, last) in sorted(stats.items(), key=lambda x: x[1][0], reverse=True):
        avg = total / count if count > 0 else 0.0
        table.add_row(str(pid), str(count), f"{total:.2f}", f"{avg:.2f}", f"{last:.2f}")
    return table


def _run_parallel(jobs: List[ScanJob], config: EngineConfig) -> Dict[int, Tuple[List[Bracket], Edges]]:
    console = Console(force_terminal=True, highlight=False, soft_wrap=False)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold cyan]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )
    task_id = progress.add_task(f"Scanning {len(jobs)} chunks ({config.method.value})",
                                total=len(jobs))

    found: Dict[int, Tuple[List[Bracket], Edges]] = {}
    worker_stats: Dict[int, Tuple[int, float, float]] = {}

    with ProcessPoolExecutor(
        max_workers=config.max_workers,
        initializer=_init_evaluator,
        initargs=(config.dtype,),
    ) as ex:
        fut_to_job: Dict[Future, ScanJob] = {ex.submit(scan_block, job): job for job in jobs}
        remaining: Set[Future] = set(fut_to_job)

        with Live(Group(progress, _build_worker_table(worker_stats)),
                  refresh_per_second=5, console=console) as live:
            while remaining:
                done, _ = wait(remaining, timeout=0.2, return_when=FIRST_COMPLETED)
                for fut in done:
                    remaining.remove(fut)
                    job = fut_to_job[fut]
                    try:
                        index, brackets, edges, elapsed, pid = fut.result()
                    except Exception as e:
                        raise RuntimeError(
                            f"Chunk {job.index} [{job.start_t}, {job.start_t + job.length}] failed: {e}"
                        ) from e
                    found[index] = (brackets, edges)
                    count, total_t, _ = worker_stats.get(pid, (0, 0.0, 0.0))
                    worker_stats[pid] = (count + 1, total_t + elapsed, elapsed)
                    progress.update(task_id, advance=1)
                live.update(Group(progress, _build_worker_table(worker_stats)))
    return found


# ------------------------------- driver routine -------------------------------

def scan(t_min: float, t_max: float, config: Optional[EngineConfig] = None) -> ScanResult:
    """
    Locate zeros of Z(t) in [t_min, t_max].

    Parameters
    ----------
    t_min, t_max : float
        Scan range, t_max > t_min.
    config : EngineConfig | None
        Method, dtype, sampling density and worker count. Defaults to
        `EngineConfig.default()` (Euler–Maclaurin, float64, sequential).

    Returns
    -------
    ScanResult
        Refined zeros in ascending order plus the bracket count per chunk.
    """
    config = config or EngineConfig.default()
    jobs = plan_jobs(t_min, t_max, config)
    workers_str = "seq" if config.max_workers == 1 else (str(config.max_workers) if config.max_workers else "default")
    log.info(f"Scanning t in [{t_min}, {t_max}]: {len(jobs)} chunks, "
             f"method={config.method.value}, dtype={config.dtype}, workers={workers_str}")

    t0 = time.time()
    if config.max_workers == 1:
        found = {}
        for job in jobs:
            index, brackets, edges, _, _ = scan_block(job)
            found[index] = (brackets, edges)
    else:
        found = _run_parallel(jobs, config)

    ev = _evaluator_for(config.dtype)
    zeros: List[float] = []
    for job in jobs:
        f = _chunk_function(ev, job)
        for a, b in found[job.index][0]:
            zeros.append(refine_zero(f, a, b, config.refine_tol, config.max_iter))
    zeros.extend(boundary_zeros(jobs, {i: edges for i, (_, edges) in found.items()}))

    # brackets from neighbouring chunks can refine to the same zero
    zeros.sort()
    unique: List[float] = []
    for z in zeros:
        if not unique or z - unique[-1] > 10 * config.refine_tol:
            unique.append(z)

    log.info(f"Found {len(unique)} zeros in {time.time() - t0:.2f}s")
    return ScanResult(
        t_min=t_min,
        t_max=t_max,
        method=config.method,
        zeros=np.array(unique),
        chunk_counts=[len(found[i][0]) for i in sorted(found)],
    )
