import logging
from typing import Optional

from sampleseries.cli.visuals import get_visuals_backend
from sampleseries.pipeline.cycles import CycleRunner, RunReport


logger = logging.getLogger(__name__)


def run_with_visuals(runner: CycleRunner, *, visuals: Optional[str], cycle_count: Optional[int] = None) -> RunReport:
    """Execute a full run inside a visuals backend.

    - Picks backend from visuals string (auto|tqdm|rich|off)
    - Advances the progress display once per finished cycle
    - Restores the runner's own callback afterwards
    """
    backend = get_visuals_backend(visuals)
    total = cycle_count if cycle_count is not None else runner.config.resolve_cycles(runner.cpu_count)
    logger.debug("Visuals backend: %s (%d cycles)", backend.name, total)

    previous = runner.on_cycle_done
    with backend.track(total) as advance:
        def _on_done(result):
            advance(result)
            if previous is not None:
                previous(result)

        runner.on_cycle_done = _on_done
        try:
            return runner.run(cycle_count=cycle_count)
        finally:
            runner.on_cycle_done = previous
