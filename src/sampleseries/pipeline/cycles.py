from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from sampleseries.config.resolution import cascade, detect_cpu_count, effective_parallelism
from sampleseries.config.run import RunConfig
from sampleseries.diagnostics import Diagnostics
from sampleseries.sources.series import SeriesBuilder
from sampleseries.utils.time import total_ms

logger = logging.getLogger(__name__)

BuilderFactory = Callable[[int, datetime, timedelta], SeriesBuilder]
CycleCallback = Callable[["CycleResult"], None]


@dataclass
class CycleResult:
    """Outcome of one build/validate/sum cycle."""

    index: int
    build_time: Optional[timedelta] = None
    validation_time: Optional[timedelta] = None
    samples_validated: int = 0
    value_sum: Optional[Decimal] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cycle_time(self) -> timedelta:
        total = timedelta(0)
        for part in (self.build_time, self.validation_time):
            if part is not None:
                total += part
        return total

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return f"{type(self.error).__name__}: {self.error}"


@dataclass
class RunReport:
    results: List[CycleResult] = field(default_factory=list)
    elapsed: timedelta = timedelta(0)
    workers: int = 1

    @property
    def succeeded(self) -> List[CycleResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[CycleResult]:
        return [r for r in self.results if not r.ok]

    @property
    def elapsed_ms(self) -> float:
        return total_ms(self.elapsed)


def _elapsed_since(started: float) -> timedelta:
    return timedelta(seconds=time.perf_counter() - started)


class CycleRunner:
    """Runs independent build -> validate -> sum cycles on a bounded pool.

    A failing cycle is recorded as a failed ``CycleResult``; it never stops
    sibling cycles or the run itself.
    """

    def __init__(
        self,
        config: Optional[RunConfig] = None,
        *,
        diagnostics: Optional[Diagnostics] = None,
        builder_factory: Optional[BuilderFactory] = None,
        cpu_count: Optional[int] = None,
        on_cycle_done: Optional[CycleCallback] = None,
    ):
        self.config = config or RunConfig()
        self.diagnostics = diagnostics or Diagnostics()
        self.cpu_count = cpu_count if cpu_count is not None else detect_cpu_count()
        self._builder_factory = builder_factory or self._default_builder
        self.on_cycle_done = on_cycle_done

    @property
    def workers(self) -> int:
        return effective_parallelism(self.cpu_count, self.config.max_parallel_cycles)

    def _default_builder(self, index: int, start: datetime, interval: timedelta) -> SeriesBuilder:
        cfg = self.config
        return SeriesBuilder(
            start,
            interval,
            load_work_units=cfg.load_work_units,
            validate_work_units=cfg.validate_work_units,
            validation_workers=cfg.validation_workers,
            validation_chunk_size=cfg.validation_chunk_size,
        )

    def run(
        self,
        cycle_count: Optional[int] = None,
        samples_per_cycle: Optional[int] = None,
        start: Optional[datetime] = None,
        interval: Optional[timedelta] = None,
    ) -> RunReport:
        cfg = self.config
        cycles = cascade(cycle_count, fallback=cfg.resolve_cycles(self.cpu_count))
        samples = cascade(samples_per_cycle, fallback=cfg.samples_per_cycle)
        start = cascade(start, fallback=cfg.start_time)
        interval = cascade(interval, fallback=cfg.interval)
        workers = self.workers

        started = time.perf_counter()
        self.diagnostics.record(
            f"Starting Execution on a {self.cpu_count} core system. "
            f"A total of {cycles} cycles will be run"
        )
        logger.debug("Cycle pool size: %d", workers)

        results: List[CycleResult] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cycle") as pool:
            futures = [
                pool.submit(self._run_cycle, index, samples, start, interval)
                for index in range(cycles)
            ]
            for future in as_completed(futures):
                result = future.result()
                results.append(result)
                if self.on_cycle_done is not None:
                    try:
                        self.on_cycle_done(result)
                    except Exception:
                        logger.exception("Cycle callback failed for cycle %d", result.index)

        results.sort(key=lambda r: r.index)
        report = RunReport(results=results, elapsed=_elapsed_since(started), workers=workers)
        self.diagnostics.record("-----")
        self.diagnostics.record(
            f"Execution Finished. Total Elapsed Time: {report.elapsed_ms:,.2f} ms."
        )
        return report

    def _run_cycle(
        self,
        index: int,
        samples: int,
        start: datetime,
        interval: timedelta,
    ) -> CycleResult:
        record = self.diagnostics.record
        result = CycleResult(index=index)
        try:
            builder = self._builder_factory(index, start, interval)

            record(f"Cycle {index} Started Sample Load.")
            timer = time.perf_counter()
            builder.build(samples)
            result.build_time = _elapsed_since(timer)
            record(
                f"Cycle {index} Finished Sample Load. "
                f"Load Time: {total_ms(result.build_time):,.2f} ms."
            )

            record(f"Cycle {index} Started Sample Validation.")
            timer = time.perf_counter()
            result.samples_validated = builder.validate()
            result.validation_time = _elapsed_since(timer)
            record(
                f"Cycle {index} Finished Sample Validation. "
                f"Total Samples Validated: {result.samples_validated}. "
                f"Validation Time: {total_ms(result.validation_time):,.2f} ms."
            )

            result.value_sum = builder.value_sum()
            record(f"Cycle {index} Sum of All Samples: {result.value_sum:,.20f}.")
            record(
                f"Cycle {index} Finished. "
                f"Total Cycle Time: {total_ms(result.cycle_time):,.2f} ms."
            )
        except Exception as exc:
            result.error = exc
            self.diagnostics.record_failure(f"Execution Failed in Cycle {index}!", exc)
        return result
