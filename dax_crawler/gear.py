"""Worker orchestration: partition identifiers, run workers, sum their counts."""

from __future__ import annotations

import multiprocessing
import time
from dataclasses import dataclass
from multiprocessing.context import BaseContext
from multiprocessing.process import BaseProcess
from typing import Callable, Iterable, Sequence

import structlog

from .config import ScraperConfig
from .errors import ConfigurationError
from .engine.partition import non_empty_partitions
from .logging_conf import worker_logger


@dataclass(frozen=True, slots=True)
class BatchJob:
    """Work handed to one worker: its identifier partition and the fields."""

    identifiers: tuple[str, ...]
    fields: tuple[str, ...]
    index: int = 0
    concurrency: int = 1


WorkerBody = Callable[[BatchJob], int]


def _run_worker(body: WorkerBody, job: BatchJob) -> int:
    """Run ``body`` and confine any failure to this worker (count 0)."""

    logger = worker_logger(job.index)
    logger.info("worker_started", identifiers=len(job.identifiers), concurrency=job.concurrency)
    try:
        count = int(body(job))
    except Exception as exc:  # noqa: BLE001
        logger.error("worker_failed", error=str(exc), error_type=exc.__class__.__name__, exc_info=True)
        return 0
    logger.info("worker_finished", count=count)
    return count


def _worker_main(body: WorkerBody, job: BatchJob, channel) -> None:
    channel.put(_run_worker(body, job))


class ScrapeSession:
    """Worker handles and the aggregation channel of one ``run_batch`` call.

    The channel is a ``SimpleQueue``: every worker writes exactly one integer
    and only the orchestrator reads. ``close`` reaps whatever is still alive.
    """

    def __init__(self, config: ScraperConfig, context: BaseContext) -> None:
        self.config = config
        self.context = context
        self.channel = context.SimpleQueue()
        self.workers: list[BaseProcess] = []

    def __enter__(self) -> "ScrapeSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def spawn(self, body: WorkerBody, job: BatchJob) -> BaseProcess:
        process = self.context.Process(
            target=_worker_main,
            args=(body, job, self.channel),
            name=f"dax-worker-{job.index}",
            daemon=True,
        )
        process.start()
        self.workers.append(process)
        return process

    def report(self, count: int) -> None:
        self.channel.put(count)

    def wait(self, timeout: float) -> list[BaseProcess]:
        """Join all workers within ``timeout`` seconds in total.

        Workers still running afterwards are terminated, reaped and returned.
        """

        deadline = time.monotonic() + timeout
        for process in self.workers:
            process.join(max(0.0, deadline - time.monotonic()))
        stragglers = [process for process in self.workers if process.is_alive()]
        self._terminate(stragglers)
        return stragglers

    def collect(self) -> list[int]:
        results: list[int] = []
        while not self.channel.empty():
            results.append(int(self.channel.get()))
        return results

    def close(self) -> None:
        self._terminate([process for process in self.workers if process.is_alive()])
        for process in self.workers:
            process.close()
        self.workers.clear()
        self.channel.close()

    @staticmethod
    def _terminate(processes: Iterable[BaseProcess]) -> None:
        processes = list(processes)
        for process in processes:
            process.terminate()
        for process in processes:
            process.join()


class Gear:
    """Spawn one worker per identifier partition and aggregate their counts.

    With ``parallelism == 1`` the single worker body runs inline in the
    calling process. Otherwise each non-empty partition gets its own
    process; the orchestrator waits at most ``process_timeout`` seconds for
    all of them, terminates the rest, and sums whatever results reached the
    aggregation channel. Workers that crash or are terminated contribute 0.
    """

    def __init__(
        self,
        config: ScraperConfig,
        worker_body: WorkerBody,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.worker_body = worker_body
        self.logger = logger or structlog.get_logger("dax_crawler.gear")

    def jobs_for(self, identifiers: Sequence[str], fields: Sequence[str]) -> list[BatchJob]:
        if self.config.request_group_size < 1:
            raise ConfigurationError(
                f"request group size must be >= 1, got {self.config.request_group_size}"
            )
        partitions = non_empty_partitions(identifiers, self.config.parallelism)
        concurrency = self.config.worker_concurrency(len(partitions))
        return [
            BatchJob(tuple(part), tuple(fields), index=index, concurrency=concurrency)
            for index, part in enumerate(partitions)
        ]

    def run_batch(self, identifiers: Sequence[str], fields: Sequence[str]) -> int:
        """Scrape ``identifiers`` for ``fields``; return the total persisted count."""

        if isinstance(identifiers, str):
            raise TypeError("identifiers must be a sequence of strings, not a string")
        identifiers = [str(identifier) for identifier in identifiers]
        if not identifiers:
            return 0
        jobs = self.jobs_for(identifiers, fields)
        self.logger.info(
            "run_started",
            identifiers=len(identifiers),
            workers=len(jobs),
            fields=list(fields),
        )

        started = time.monotonic()
        with ScrapeSession(self.config, self._context()) as session:
            if self.config.parallelism == 1:
                session.report(_run_worker(self.worker_body, jobs[0]))
            else:
                for job in jobs:
                    session.spawn(self.worker_body, job)
                stragglers = session.wait(self.config.process_timeout)
                if stragglers:
                    self.logger.warning(
                        "workers_timed_out",
                        timeout=self.config.process_timeout,
                        terminated=[process.name for process in stragglers],
                    )
            results = session.collect()

        total = sum(results)
        self.logger.info(
            "run_finished",
            total=total,
            reported=len(results),
            workers=len(jobs),
            elapsed=round(time.monotonic() - started, 3),
        )
        return total

    def _context(self) -> BaseContext:
        return multiprocessing.get_context(self.config.start_method)


__all__ = ["BatchJob", "Gear", "ScrapeSession", "WorkerBody"]
