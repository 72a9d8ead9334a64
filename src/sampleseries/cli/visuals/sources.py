from contextlib import contextmanager
import logging
import sys
from typing import Callable, ContextManager, Optional

from sampleseries.diagnostics import LOGGER_NAME
from sampleseries.pipeline.cycles import CycleResult

Advance = Callable[[CycleResult], None]


def _is_tty() -> bool:
    try:
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    except Exception:
        return False


def _describe(result: CycleResult) -> str:
    status = "ok" if result.ok else "failed"
    return f"cycle {result.index} {status}"


class VisualsBackend:
    """Interface for visuals backends.

    ``track`` is a context manager yielding a callback to invoke once per
    finished cycle.
    """

    name = "off"

    def track(self, total: int, label: str = "cycles") -> ContextManager[Advance]:
        @contextmanager
        def _noop():
            yield lambda result: None

        return _noop()


class _TqdmBackend(VisualsBackend):
    name = "tqdm"

    def track(self, total: int, label: str = "cycles"):
        from tqdm import tqdm
        from tqdm.contrib.logging import logging_redirect_tqdm

        @contextmanager
        def _cm():
            bar = tqdm(total=total, desc=label, unit="cycle", dynamic_ncols=True, leave=False)

            def _advance(result: CycleResult) -> None:
                bar.set_postfix_str(_describe(result))
                bar.update(1)

            try:
                with logging_redirect_tqdm(loggers=[logging.getLogger(LOGGER_NAME)]):
                    yield _advance
            finally:
                bar.close()

        return _cm()


class _RichBackend(VisualsBackend):
    name = "rich"

    def track(self, total: int, label: str = "cycles"):
        from rich.console import Console
        from rich.logging import RichHandler
        from rich.progress import (
            BarColumn,
            MofNCompleteColumn,
            Progress,
            SpinnerColumn,
            TextColumn,
            TimeElapsedColumn,
        )

        @contextmanager
        def _cm():
            console = Console(file=sys.stderr, markup=False, highlight=False, soft_wrap=True)
            progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}", markup=False),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            )
            # Route package console logging through rich while the bar is live.
            pkg_logger = logging.getLogger(LOGGER_NAME)
            swapped = [
                h for h in pkg_logger.handlers
                if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
            ]
            rich_handler = RichHandler(
                console=console,
                show_time=False,
                show_level=False,
                show_path=False,
                markup=False,
                rich_tracebacks=False,
            )
            for handler in swapped:
                pkg_logger.removeHandler(handler)
            pkg_logger.addHandler(rich_handler)
            task_id = progress.add_task(label, total=total)

            def _advance(result: CycleResult) -> None:
                progress.update(task_id, advance=1, description=f"{label}: {_describe(result)}")

            try:
                with progress:
                    yield _advance
            finally:
                pkg_logger.removeHandler(rich_handler)
                for handler in swapped:
                    pkg_logger.addHandler(handler)

        return _cm()


def _rich_available() -> bool:
    try:
        import rich  # noqa: F401
        return True
    except Exception:
        return False


def get_visuals_backend(provider: Optional[str]) -> VisualsBackend:
    mode = (provider or "auto").lower()
    if mode == "off":
        return VisualsBackend()
    if mode == "tqdm":
        return _TqdmBackend()
    if mode == "rich":
        return _RichBackend() if _rich_available() else _TqdmBackend()
    # auto
    if not _is_tty():
        return VisualsBackend()
    if _rich_available():
        return _RichBackend()
    return _TqdmBackend()
