"""Worker pool: one isolated process per scrape, bounded concurrency.

Each admitted request spawns a fresh worker process in its own process
group, so a crash or hang cannot leak into another request. A semaphore
caps how many workers run at once; further requests queue. The timeout is
armed when the worker is spawned (queue time is not counted) and kills the
whole process group, browser included.
"""
import asyncio
import logging
import os
import signal
import sys
import time
from typing import Sequence

from ..engine.errors import EnvelopeParseError, ErrorKind, WorkerTimeoutError
from ..models import ScrapeResult
from .envelope import parse_envelope

log = logging.getLogger(__name__)

DEFAULT_WORKER_COMMAND = (sys.executable, "-m", "timeline_scraper.worker")
MAX_OUTPUT_BYTES = 10 * 1024 * 1024
READ_CHUNK = 64 * 1024
# Grace period for pipe readers after the worker exits.
DRAIN_GRACE = 5.0


class OutputLimitExceeded(Exception):
    pass


class WorkerPool:
    """Worker orchestrator: ``await pool.run(url)`` always yields one ScrapeResult."""

    def __init__(self, *, timeout: float = 120.0, max_workers: int = 4,
                 command: Sequence[str] = DEFAULT_WORKER_COMMAND,
                 max_output_bytes: int = MAX_OUTPUT_BYTES,
                 env: dict | None = None):
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.command = tuple(command)
        self.max_output_bytes = max_output_bytes
        self.env = env
        self.active = 0
        self.waiting = 0
        self._semaphore: asyncio.Semaphore | None = None

    def _slots(self) -> asyncio.Semaphore:
        # Created lazily so it binds to the running loop.
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_workers)
        return self._semaphore

    @property
    def stats(self) -> dict:
        return {"active": self.active, "waiting": self.waiting, "limit": self.max_workers}

    async def run(self, url: str, timeout: float | None = None) -> ScrapeResult:
        timeout = self.timeout if timeout is None else timeout
        self.waiting += 1
        try:
            await self._slots().acquire()
        finally:
            self.waiting -= 1
        self.active += 1
        try:
            return await self._run_worker(url, timeout)
        finally:
            self.active -= 1
            self._slots().release()

    # ── One worker ──────────────────────────────────────────────────────────

    async def _run_worker(self, url: str, timeout: float) -> ScrapeResult:
        started = time.monotonic()
        log.info(f"Starting scrape for: {url}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command, url,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.env,
                start_new_session=True,
            )
        except OSError as e:
            log.error(f"Failed to spawn worker: {e}")
            return ScrapeResult.failure(url, f"Failed to spawn worker: {e}", ErrorKind.INTERNAL.value)

        stdout = bytearray()
        stdout_task = asyncio.ensure_future(self._collect(proc, proc.stdout, stdout))
        stderr_task = asyncio.ensure_future(self._relay_stderr(proc.stderr, proc.pid))

        try:
            try:
                await asyncio.wait_for(self._wait_exit(proc, stdout_task), timeout)
            except asyncio.TimeoutError:
                self._kill(proc)
                await proc.wait()
                raise WorkerTimeoutError(f"Scraping timed out after {timeout:g}s") from None
            except OutputLimitExceeded:
                self._kill(proc)
                await proc.wait()
                raise EnvelopeParseError(
                    f"Worker output exceeded {self.max_output_bytes} bytes") from None

            await self._finish(stdout_task, stderr_task)
            elapsed = time.monotonic() - started
            if not stdout.strip() and proc.returncode:
                raise EnvelopeParseError(
                    f"Worker exited with code {proc.returncode} and produced no output")
            result = parse_envelope(bytes(stdout))
        except (WorkerTimeoutError, EnvelopeParseError) as e:
            log.error(f"Scraping failed for {url}: {e}")
            return ScrapeResult.failure(url, str(e), e.kind.value,
                                        {"durationSeconds": round(time.monotonic() - started, 2)})
        except BaseException:
            # Cancelled: the worker must not outlive its slot.
            if proc.returncode is None:
                self._kill(proc)
                await proc.wait()
            raise
        finally:
            for task in (stdout_task, stderr_task):
                if not task.done():
                    task.cancel()

        if result.success:
            log.info(f"Successfully scraped {result.tweets_count} posts from {url} in {elapsed:.1f}s")
        else:
            log.warning(f"Worker reported failure for {url}: {result.error}")
        if result.url != url:
            result = ScrapeResult(success=result.success, url=url, tweets=result.tweets,
                                  error=result.error, error_kind=result.error_kind,
                                  scraped_at=result.scraped_at, metadata=result.metadata)
        return result

    async def _wait_exit(self, proc, stdout_task):
        exit_task = asyncio.ensure_future(proc.wait())
        try:
            done, _ = await asyncio.wait({exit_task, stdout_task},
                                         return_when=asyncio.FIRST_COMPLETED)
            if stdout_task in done and stdout_task.exception() is not None:
                raise stdout_task.exception()
            await exit_task
        finally:
            if not exit_task.done():
                exit_task.cancel()

    async def _collect(self, proc, stream, sink: bytearray):
        while True:
            chunk = await stream.read(READ_CHUNK)
            if not chunk:
                return
            sink.extend(chunk)
            if len(sink) > self.max_output_bytes:
                raise OutputLimitExceeded()

    async def _relay_stderr(self, stream, pid: int):
        while True:
            line = await stream.readline()
            if not line:
                return
            log.debug(f"  [worker {pid}] {line.decode('utf-8', 'replace').rstrip()}")

    async def _finish(self, stdout_task, stderr_task):
        """Let readers hit EOF; a browser grandchild may hold the pipe open."""
        try:
            await asyncio.wait_for(asyncio.shield(stdout_task), DRAIN_GRACE)
        except asyncio.TimeoutError:
            log.warning("Worker stdout still open after exit; using collected output")
        except OutputLimitExceeded:
            raise EnvelopeParseError(
                f"Worker output exceeded {self.max_output_bytes} bytes") from None
        if not stderr_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(stderr_task), 0.5)
            except asyncio.TimeoutError:
                pass

    @staticmethod
    def _kill(proc):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        log.warning(f"Killed worker {proc.pid}")
