"""
Parallel work distribution.

The image is split into more row chunks than there are workers. Each worker
thread repeatedly claims the next unclaimed chunk from a shared queue, so a
slow chunk only delays the worker holding it while the others drain the
rest of the queue. Finished rows go straight into the frame buffer; because
chunks never overlap, only the claim itself is synchronized.

Per-chunk and per-frame timings are recorded for diagnosing imbalance. They
never influence scheduling.
"""

from __future__ import annotations
import logging
import math
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .camera import Camera
from .config import RenderConfig
from .framebuffer import FrameBuffer
from .integrator import render_rows
from .shapes import Hittable

logger = logging.getLogger(__name__)

# Rows per chunk when no explicit chunk count is requested
DEFAULT_CHUNK_ROWS = 4


class RenderError(RuntimeError):
    """A render was aborted; no partial image is returned."""


@dataclass(frozen=True)
class Chunk:
    """A contiguous range of image rows [row_start, row_end)."""
    index: int
    row_start: int
    row_end: int

    @property
    def rows(self) -> int:
        return self.row_end - self.row_start


@dataclass(frozen=True)
class ChunkTiming:
    """Wall-clock time one worker spent on one chunk."""
    chunk: Chunk
    worker: str
    seconds: float


@dataclass
class RenderStats:
    """Timing report for a finished frame."""
    frame_seconds: float
    num_workers: int
    chunks: List[ChunkTiming] = field(default_factory=list)

    @property
    def slowest(self) -> Optional[ChunkTiming]:
        return max(self.chunks, key=lambda c: c.seconds, default=None)

    @property
    def fastest(self) -> Optional[ChunkTiming]:
        return min(self.chunks, key=lambda c: c.seconds, default=None)

    @property
    def imbalance(self) -> float:
        """Slowest chunk time divided by the fastest (1.0 = perfectly even)."""
        if not self.chunks or self.fastest.seconds <= 0:
            return 1.0
        return self.slowest.seconds / self.fastest.seconds


def partition_rows(height: int, num_chunks: int) -> List[Chunk]:
    """Split ``height`` rows into contiguous chunks.

    Chunk sizes differ by at most one row. The count is clamped to
    [1, height] so no chunk is empty.
    """
    if height <= 0:
        raise ValueError(f"height must be positive, got {height}")
    num_chunks = max(1, min(num_chunks, height))
    base, extra = divmod(height, num_chunks)

    chunks = []
    start = 0
    for index in range(num_chunks):
        size = base + (1 if index < extra else 0)
        chunks.append(Chunk(index, start, start + size))
        start += size
    return chunks


def plan_chunk_count(height: int, num_workers: int, chunk_rows: int = DEFAULT_CHUNK_ROWS) -> int:
    """Number of chunks for dynamic balancing: small batches, at least one per worker."""
    count = math.ceil(height / max(1, chunk_rows))
    return max(1, min(height, max(count, num_workers)))


class ChunkQueue:
    """Hands out each chunk exactly once, in order, to any number of threads."""

    def __init__(self, chunks: Sequence[Chunk]):
        self._chunks = tuple(chunks)
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> Optional[Chunk]:
        """Atomically take the next chunk, or None when all are claimed."""
        with self._lock:
            if self._next >= len(self._chunks):
                return None
            chunk = self._chunks[self._next]
            self._next += 1
            return chunk

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._chunks) - self._next

    def __len__(self) -> int:
        return len(self._chunks)


class ChunkScheduler:
    """Renders frames on a fixed pool of worker threads."""

    def __init__(
        self,
        num_workers: int = 0,
        num_chunks: Optional[int] = None,
        chunk_rows: int = DEFAULT_CHUNK_ROWS,
        progress_callback: Optional[Callable[[float], None]] = None
    ):
        """Create a scheduler.

        Args:
            num_workers: Worker threads (0 = auto-detect)
            num_chunks: Exact number of chunks; overrides chunk_rows
            chunk_rows: Target rows per chunk when num_chunks is not given
            progress_callback: Called with the completed fraction after each chunk
        """
        if num_workers <= 0:
            num_workers = os.cpu_count() or 4
        if chunk_rows <= 0:
            raise ValueError(f"chunk_rows must be positive, got {chunk_rows}")
        if num_chunks is not None and num_chunks <= 0:
            raise ValueError(f"num_chunks must be positive, got {num_chunks}")
        self.num_workers = num_workers
        self.num_chunks = num_chunks
        self.chunk_rows = chunk_rows
        self.progress_callback = progress_callback
        self.last_stats: Optional[RenderStats] = None

    def plan(self, height: int) -> List[Chunk]:
        """The chunks a frame of the given height is split into."""
        if self.num_chunks is not None:
            return partition_rows(height, self.num_chunks)
        return partition_rows(height, plan_chunk_count(height, self.num_workers, self.chunk_rows))

    def render(self, scene: Hittable, camera: Camera, config: RenderConfig) -> FrameBuffer:
        """Render one frame, blocking until every chunk is done.

        Raises:
            RenderError: If any chunk fails; the remaining workers stop
                claiming chunks and no image is returned
        """
        chunks = self.plan(config.height)
        queue = ChunkQueue(chunks)
        frame = FrameBuffer(config.width, config.height)
        abort = threading.Event()
        lock = threading.Lock()
        timings: List[ChunkTiming] = []
        total = len(chunks)
        workers = min(self.num_workers, total)

        logger.info(
            "Rendering %dx%d, %d spp, depth %d: %d chunks on %d workers",
            config.width, config.height, config.samples_per_pixel, config.max_depth,
            total, workers
        )

        def work() -> None:
            worker = threading.current_thread().name
            while not abort.is_set():
                chunk = queue.claim()
                if chunk is None:
                    return

                start = time.perf_counter()
                try:
                    rows = render_rows(scene, camera, config, chunk.row_start, chunk.row_end)
                    frame.write_rows(chunk.row_start, rows)
                    elapsed = time.perf_counter() - start

                    logger.debug(
                        "Chunk %d (rows %d-%d) on %s: %.1fms",
                        chunk.index, chunk.row_start, chunk.row_end, worker, elapsed * 1000
                    )
                    with lock:
                        timings.append(ChunkTiming(chunk, worker, elapsed))
                        done = len(timings)
                    if self.progress_callback:
                        self.progress_callback(done / total)
                except Exception as exc:
                    abort.set()
                    raise RenderError(
                        f"Chunk {chunk.index} (rows {chunk.row_start}-{chunk.row_end}) failed: {exc}"
                    ) from exc

        frame_start = time.perf_counter()
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='spheretrace') as executor:
                futures = [executor.submit(work) for _ in range(workers)]
            for future in futures:
                error = future.exception()
                if error is not None:
                    raise error
        else:
            work()
        frame_seconds = time.perf_counter() - frame_start

        if not frame.is_complete():
            raise RenderError(f"Frame incomplete, missing rows: {frame.missing_rows()[:10]}")

        stats = RenderStats(
            frame_seconds=frame_seconds,
            num_workers=workers,
            chunks=sorted(timings, key=lambda t: t.chunk.index)
        )
        self.last_stats = stats
        logger.info(
            "Frame time: %.0fms (chunks %.0fms-%.0fms, imbalance %.1fx)",
            frame_seconds * 1000, stats.fastest.seconds * 1000,
            stats.slowest.seconds * 1000, stats.imbalance
        )
        return frame


def render(
    scene: Hittable,
    camera: Camera,
    config: RenderConfig,
    num_workers: int = 0,
    num_chunks: Optional[int] = None,
    chunk_rows: int = DEFAULT_CHUNK_ROWS
) -> FrameBuffer:
    """Render a frame with a throwaway scheduler."""
    return ChunkScheduler(num_workers, num_chunks, chunk_rows).render(scene, camera, config)
